"""Decoding runtime: token cursors, configuration, messages and the decoder."""
