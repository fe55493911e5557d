"""
Core risk algorithms
"""
