"""
Benchmark suite for JSON pointer library performance.

Compares the pointer libraries registered in jptrbench:
- jptr (this package's RFC 6901 implementation)
- jsonpointer (python-json-pointer)
- jsonpath (python-jsonpath)
- naive (string splitting on every call)

Measures lookup speed and memory usage across different document shapes.
"""
