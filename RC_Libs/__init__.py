"""
RC_Libs - Recompose Library Modules

This package contains the raster composition engine for Recompose,
organized into specialized sub-packages:

- GeometryLib: Normalized/fractional to pixel coordinate mapping
- RasterLib: Raster values, data URL transport, opacity and crop primitives
- LayersLib: Layer model, ordered layer stack, region extraction, transforms
- CompositionLib: Layer recomposition and fractional cropping
- CollaboratorsLib: Vision/generation/background-removal contracts
- SessionStoreLib: Session snapshot persistence
"""

__version__ = "0.1.0"
