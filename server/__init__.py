"""
FastAPI backend server for the VedaSmart web application.

Provides REST API and WebSocket endpoints for:
- Chapter and style sample upload
- Real-time generation progress
- Deck preview and PPTX export
- Settings management
"""

__version__ = "0.1.0"
