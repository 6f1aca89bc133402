import importlib
import time
import logging
from dataclasses import dataclass, field
from typing import List, Dict, Any

from agents.auction_interface import AuctionInterface
import auction_server.db as db
import requests

@dataclass
class AgentConfig:
    module_name: str
    attribute_name: str
    polling_rate: float = 0.5
    extra_kwargs: Dict[str, Any] = field(default_factory=dict)

def make_agent(
    agent_config: AgentConfig,
    name: str,
    server_url: str,
) -> AuctionInterface:
    """
    Dynamically import and instantiate a bidder with extra kwargs.
    agent_config holds: module_name, attribute_name, polling_rate, extra_kwargs
    """
    module = importlib.import_module(f"agents.bidders.{agent_config.module_name}")
    factory = getattr(module, agent_config.attribute_name)

    # Base init kwargs
    init_kwargs = {
        "name": name,
        "server_url": server_url,
        "polling_rate": agent_config.polling_rate,
    }
    # Merge agent-specific overrides
    init_kwargs.update(agent_config.extra_kwargs)

    # Class-based agent
    if isinstance(factory, type) and issubclass(factory, AuctionInterface):
        return factory(**init_kwargs)

    # Factory-based agent
    if callable(factory):
        try:
            return factory(**init_kwargs)
        except TypeError:
            # Fallback to positional signature
            return factory(name, server_url, agent_config.polling_rate)

    raise ValueError(f"Cannot instantiate agent from entry {agent_config}")

def preflight_check(server_url: str, num_agents: int) -> Dict[str, Any]:
    """
    Make sure the server is idle in its lobby with enough free seats.
    """
    try:
        status_resp = requests.get(f"{server_url}/status", timeout=5)
        status_resp.raise_for_status()
        status_data = status_resp.json()
    except Exception as exc:
        raise RuntimeError(f"Failed to fetch server status from {server_url}/status: {exc}")

    if status_data.get("state") != "Lobby":
        raise RuntimeError(f"Server is busy: current status is '{status_data.get('state')}'.")
    if int(status_data.get("open_seats", 0)) < num_agents:
        raise RuntimeError(
            f"Not enough seats: {num_agents} agents but {status_data.get('open_seats')} open seats."
        )
    return status_data

def run_game(
    agents: List[AgentConfig],
    server_url: str,
    log_agents: bool = False,
) -> None:
    logging.basicConfig(level=logging.INFO)

    status = preflight_check(server_url, len(agents))
    if len(agents) != int(status.get("capacity", len(agents))):
        raise RuntimeError(f"Table seats {status.get('capacity')} participants, got {len(agents)} agents.")

    logging.info(f"Spawning {len(agents)} agents...")
    clients = []
    for idx, agent_config in enumerate(agents):
        player_name = f"{agent_config.attribute_name}{idx}"
        logging.info(f"Starting agent {player_name} ({agent_config.module_name}.{agent_config.attribute_name})")
        client = make_agent(agent_config, player_name, server_url)
        if log_agents:
            db.log_agent(
                client.player_id,
                agent_config.module_name,
                agent_config.attribute_name,
                agent_config.extra_kwargs,
                client.polling_rate,
            )
        clients.append(client)

    for client in clients:
        client.ready()

    try:
        # Wait until any client sees the round end
        while True:
            time.sleep(1)
            done = next((c for c in clients if c.finished_rounds > 0), None)
            if not done:
                continue
            logging.info("Detected round completion.")
            logging.info("--- Final Rosters ---")
            for p in done.view.players:
                lots = ", ".join(f"{a['name']} ({a['position']}) {a['price']}" for a in p.get("roster", []))
                logging.info(f"{p.get('nickname')}: {p.get('points')} points left; {lots}")
            break
    except KeyboardInterrupt:
        pass
    finally:
        logging.info("Shutting down agents...")
        for c in clients:
            try:
                c.stop()
            except Exception:
                logging.exception("Error stopping agent")
