"""
API server: FastAPI surface over the Wrapped pipeline.
"""
