"""Service utilities: scoped and labeled metrics, protobuf hashing, generic sets, weighted selection and a profiling server."""

__version__ = "0.1.0"