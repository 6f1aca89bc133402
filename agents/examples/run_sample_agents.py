from typing import List
from agents.dispatcher import AgentConfig, run_game

SERVER_URL = "http://localhost:5000"

# module_name is the Python module (without .py) in the bidders folder.
# attribute_name is the class name (subclass of AuctionInterface) or factory function name.
# extra_kwargs is a dict of additional parameters for that agent (empty if none).
AGENTS: List[AgentConfig] = [
    AgentConfig("value_bidder", "ValueBidder", 0.5, {"categories": {"mid": 2.0}}),
    AgentConfig("value_bidder", "ValueBidder", 0.5, {"bid_below": 3}),
    AgentConfig("random_bidder", "RandomBidder", 0.5, {"aggression": 0.4}),
]

if __name__ == '__main__':
    run_game(AGENTS, SERVER_URL)
