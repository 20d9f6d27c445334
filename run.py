import eventlet
eventlet.monkey_patch()

import os

from fitdesk import create_app
from fitdesk.extensions import socketio

app = create_app(os.getenv('FLASK_CONFIG', 'default'))

if __name__ == '__main__':
    socketio.run(app, debug=app.config.get('DEBUG', False), port=int(os.getenv('PORT', 5000)))
