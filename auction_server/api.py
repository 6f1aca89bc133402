from flask import Flask, request, jsonify, current_app

from auction_server.bidding import NOT_OPEN
from auction_server.engine import NOT_IN_LOBBY
from auction_server.errors import RosterFullError, UnknownParticipantError

app = Flask(__name__)

FULL_SERVER = "The server already has the maximum number of participants."

def _payload() -> dict:
    return request.get_json(force=True, silent=True) or {}

def _seated(pid) -> bool:
    return bool(pid) and current_app.engine.is_seated(pid)

@app.errorhandler(UnknownParticipantError)
def unknown_participant(e):
    # the participant left between the seat check and the engine call
    return jsonify(error="Invalid player_id"), 400

@app.route("/join", methods=["POST"])
def join():
    data = _payload()
    try:
        p = current_app.engine.join(data.get("name"))
    except RosterFullError:
        return jsonify(error=FULL_SERVER, event="full_server"), 409
    return jsonify(player_id=p.participant_id, nickname=p.display_name), 200

@app.route("/leave", methods=["POST"])
def leave():
    pid = _payload().get("player_id")
    if not _seated(pid):
        return jsonify(error="Invalid player_id"), 400
    current_app.engine.leave(pid)
    return jsonify(success=True), 200

@app.route("/configure", methods=["POST"])
def configure():
    data = _payload()
    pid = data.get("player_id")
    if not _seated(pid):
        return jsonify(error="Invalid player_id"), 400
    result, err = current_app.engine.configure(pid, data.get("name"), data.get("starting_points"))
    if err:
        if err == NOT_IN_LOBBY:
            return jsonify(error=err), 409
        return jsonify(error=err), 400
    return jsonify(success=True, **result), 200

@app.route("/ready", methods=["POST"])
def ready():
    pid = _payload().get("player_id")
    if not _seated(pid):
        return jsonify(error="Invalid player_id"), 400
    result, err = current_app.engine.ready(pid)
    if err:
        return jsonify(error=err), 409
    return jsonify(success=True, **result), 200

@app.route("/bid", methods=["POST"])
def bid():
    data = _payload()
    pid = data.get("player_id")
    if not _seated(pid):
        return jsonify(error="Invalid player_id"), 400
    result, err = current_app.engine.place_bid(pid, data.get("amount"))
    if err:
        if err == NOT_OPEN:
            return jsonify(error=err), 409
        return jsonify(error=err), 400
    return jsonify(success=True, **result), 200

@app.route("/events", methods=["GET"])
def events():
    pid = request.args.get("player_id")
    if not _seated(pid):
        return jsonify(error="Invalid or missing player_id"), 400
    return jsonify(events=current_app.engine.notifier.drain(pid)), 200

@app.route("/state", methods=["GET"])
def state():
    pid = request.args.get("player_id")
    if not _seated(pid):
        return jsonify(error="Invalid or missing player_id"), 400
    return jsonify(current_app.engine.get_state(req_pid=pid)), 200

@app.route("/status", methods=["GET"])
def status():
    return jsonify(current_app.engine.get_status()), 200
