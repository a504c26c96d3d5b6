"""api/ -- HTTP surface of SessionGate: dispatcher, page handlers, and app assembly."""
