"""DroneVerse inspection backend following Clean Architecture.

Layers:
- domain: annotation model, drawing session, composition and report use cases
- data: image loading, raster surface, upload and report storage implementations
- presentation: FastAPI routers and models
- core: configuration, DI, security and utilities
"""
