# module logistics.app
from logistics.app_setup.factory import create_app

# App globale
app = create_app()
