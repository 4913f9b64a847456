"""Wire protocol support for swift-wire."""
