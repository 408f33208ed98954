"""CareerHub: job search tracking, resume building and interview preparation."""

__version__ = "1.0.0"
