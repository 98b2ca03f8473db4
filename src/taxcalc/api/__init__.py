"""HTTP API for taxcalcd."""
