"""handlerguard framework utilities (logging)."""
