"""Sensor feed: mock simulator, snapshot resolution and mobile trails."""
