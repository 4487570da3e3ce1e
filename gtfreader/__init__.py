"""
MIT License

gtfreader: line-oriented GTF (Gene Transfer Format) record parser.
"""

__version__ = "0.1.0"
