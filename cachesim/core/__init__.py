"""Cache model: address layout, replacement policies, access protocol."""
