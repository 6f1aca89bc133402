from auction_server import db
from auction_server.api import app
from auction_server.catalog import load_catalog
from auction_server.config import CATALOG_PATH, DB_LOGGING
from auction_server.engine import AuctionEngine

audit = None
if DB_LOGGING:
    db.init_db()
    audit = db
app.engine = AuctionEngine(load_catalog(CATALOG_PATH), audit=audit)

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, threaded=True)
