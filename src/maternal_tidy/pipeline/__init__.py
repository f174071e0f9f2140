"""Pipeline stages: skip detection, bounds, reshaping and the composed transform."""
