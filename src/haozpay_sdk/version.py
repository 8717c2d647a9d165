"""Version information for the HaozPay Python SDK"""

__version__ = "1.0.0"
