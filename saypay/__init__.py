"""SayPay - spoken expense capture."""

__version__ = "0.1.0"
