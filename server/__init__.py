"""HTTP and WebSocket shell around the river engine."""
