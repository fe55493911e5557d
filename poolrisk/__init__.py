"""
poolrisk: position risk and execution pricing for pool-backed leveraged trading
"""
