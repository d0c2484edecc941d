"""ostt-overlay: packaging and popup integration for the ostt speech-to-text tool."""

__version__ = "0.1.0"
__app_name__ = "ostt-overlay"
