"""Startup script for the ASO Keyword Analyzer service."""

import uvicorn
from dotenv import load_dotenv

from lib.provider_factory import AIProviderFactory
from service.settings import settings


def main():
    """Run the ASO Keyword Analyzer service."""
    # Load environment variables
    load_dotenv()

    factory = AIProviderFactory(settings)
    available = [p["id"] for p in factory.describe_providers() if p["available"]]

    # Log startup info
    print(f"🚀 Starting ASO Keyword Analyzer")
    print(f"📍 Host: {settings.HOST}")
    print(f"🔌 Port: {settings.PORT}")
    print(f"🤖 Available providers: {available or 'none (set GEMINI_API_KEY or ANTHROPIC_API_KEY)'}")
    print(f"📊 Keyword service: {settings.ASO_SERVICE_URL} ({settings.ASO_PLATFORM})")

    # Start the server
    uvicorn.run(
        "service.service:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
