import logging

from zimage_api import create_app
from zimage_api.core.config import settings

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

app = create_app()

if __name__ == "__main__":
    import uvicorn

    print(f"🚀 Starting Z-Image API on {settings.host}:{settings.port}")
    print(f"🌐 CORS Origins: {', '.join(settings.allowed_origins) or '(none)'}")
    print("📚 API endpoints:")
    print("  GET  /api/                   - Health check")
    print("  POST /api/generate           - Image generation")
    print("  POST /api/generate-hf        - Legacy HuggingFace generation")
    print("  POST /api/upscale            - Image upscaling")
    print("  POST /v1/images/generations  - OpenAI-compatible generation")

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
