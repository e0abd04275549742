from .routes import scan_bp

__all__ = ["scan_bp"]
