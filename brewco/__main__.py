import uvicorn

from brewco.core.config import settings

if __name__ == '__main__':
    uvicorn.run('brewco.main:app', host='0.0.0.0', port=settings.PORT)
