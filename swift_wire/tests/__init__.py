"""swift-wire test suite."""
