"""FairLend API -- AI-assisted loan decisions, appeals and customer notifications."""

__version__ = "0.1.0"
