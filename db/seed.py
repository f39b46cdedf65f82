"""Default topics, inserted once by name."""
from sqlalchemy.orm import Session

from db.store import SignalStore

SEED_TOPICS = [
    {
        "name": "US Politics",
        "description": "Presidential elections, congressional races, policy decisions, and political outcomes",
        "keywords": ["politics", "election", "congress", "president", "policy"],
        "icon_name": "Vote",
    },
    {
        "name": "Cryptocurrency",
        "description": "Bitcoin, Ethereum, DeFi protocols, and crypto market predictions",
        "keywords": ["crypto", "bitcoin", "ethereum", "defi", "blockchain"],
        "icon_name": "Coins",
    },
    {
        "name": "Artificial Intelligence",
        "description": "AI model releases, AGI timelines, and technology breakthroughs",
        "keywords": ["ai", "gpt", "artificial intelligence", "machine learning", "agi"],
        "icon_name": "Sparkles",
    },
    {
        "name": "Global Economics",
        "description": "Interest rates, GDP growth, inflation, and macroeconomic indicators",
        "keywords": ["economy", "fed", "gdp", "inflation", "rates", "recession"],
        "icon_name": "TrendingUp",
    },
    {
        "name": "Technology Giants",
        "description": "Apple, Google, Tesla, and major tech company predictions",
        "keywords": ["tech", "apple", "google", "tesla", "microsoft", "meta"],
        "icon_name": "Building2",
    },
    {
        "name": "Sports",
        "description": "NFL, NBA, FIFA, and major sporting event outcomes",
        "keywords": ["sports", "nfl", "nba", "soccer", "super bowl", "championship"],
        "icon_name": "Zap",
    },
]


def seed_topics(db: Session, verbose: bool = False) -> int:
    """Insert any missing default topics. Returns how many were created."""
    store = SignalStore(db)
    created = 0

    for topic in SEED_TOPICS:
        if store.get_topic_by_name(topic["name"]):
            if verbose:
                print(f"   Topic already exists: {topic['name']}")
            continue

        store.create_topic(**topic)
        created += 1
        if verbose:
            print(f"   ✅ Created topic: {topic['name']}")

    return created
