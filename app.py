"""Production entry point for MemberAuth using uvicorn workers"""

import uvicorn
from dotenv import load_dotenv

from memberauth.utils.config import load_settings

if __name__ == "__main__":
    # Load environment variables from .env file
    load_dotenv()

    settings = load_settings()
    server = settings.server

    print(f"Starting {settings.app.name} in {settings.app.environment} mode...")
    print(f"Host: {server.host}, Port: {server.port}, Workers: {server.workers}")

    uvicorn.run(
        "memberauth_web.main:create_app",
        factory=True,
        host=server.host,
        port=server.port,
        workers=server.workers if settings.app.is_production else 1,
        log_level="info",
        access_log=True,
    )
