"""Unit tests for the jptrbench harness and pointer library."""
