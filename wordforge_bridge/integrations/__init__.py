"""
Integration Adapter Layer

Provider-specific clients between the tool layer and remote services.
"""
