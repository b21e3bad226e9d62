import sys
import os
import logging
import uvicorn

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO,
    handlers=[logging.StreamHandler(sys.stdout)]
)

def main():
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    # Single worker: realtime rooms live in process memory
    uvicorn.run("app.main:app", host=host, port=port, workers=1, log_config=None)

if __name__ == '__main__':
    main()
