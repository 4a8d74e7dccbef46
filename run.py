"""Simple script to run the server"""

import uvicorn
from flash_registry.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "flash_registry.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
