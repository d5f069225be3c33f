import uvicorn

from app.core.config import settings


def main():
    uvicorn.run("app.main:app", host=settings.HTTP_HOST, port=settings.HTTP_PORT)


if __name__ == "__main__":
    main()
