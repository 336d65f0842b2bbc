import logging

from dotenv import load_dotenv
load_dotenv()
from parkmaster import create_app, init_database

app = create_app()

logging.basicConfig(
    level=app.config['LOG_LEVEL'],
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

init_database(app)

if __name__ == '__main__':
    app.logger.info("Park Master backend running on port %s", app.config['PORT'])
    app.run(host='0.0.0.0', port=app.config['PORT'], debug=False)
