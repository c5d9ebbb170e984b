"""App Mover - relocate a running macOS app bundle into Applications."""

try:
    from app_mover._version import version as __version__
except ImportError:
    __version__ = "0.0.0.dev0"
