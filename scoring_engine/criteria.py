"""
Scoring Engine - Criteria Catalogue.

============================================================
CATEGORIES
============================================================
Chain (A1-A5)     technical/economic decentralization
Control (B1-B6)   who can steer, halt or change the protocol
Fairness (C1-C3)  launch, distribution and governance

============================================================
MAPPINGS
============================================================
Ranges are [min, max). A (start, end) score pair is interpolated
linearly; for inverted criteria start > end, so lower raw values
score higher. Percent ranges end at 101 so that 100 % is inside.

============================================================
"""

from typing import Optional

from scoring_engine.models import Category, Criterion, Direction, ScoreMapping


INF = float("inf")


# ============================================================
# CHAIN (A1-A5)
# ============================================================

CHAIN_CRITERIA: tuple[Criterion, ...] = (
    Criterion(
        id="A1",
        name="Nakamoto Coefficient",
        category=Category.CHAIN,
        description=(
            "Number of independent entities that would need to collude to "
            "compromise the system. Higher is better."
        ),
        mappings=(
            ScoreMapping(40, INF, 10, "Excellent (>= 40)"),
            ScoreMapping(30, 40, 9, "Very Good (30-39)"),
            ScoreMapping(20, 30, (7, 8), "Good (20-29)"),
            ScoreMapping(10, 20, (5, 6), "Moderate (10-19)"),
            ScoreMapping(4, 10, (3, 4), "Low (4-9)"),
            ScoreMapping(0, 4, (1, 2), "Critical (<= 3)"),
        ),
    ),
    Criterion(
        id="A2",
        name="Validator/Miner Concentration",
        category=Category.CHAIN,
        direction=Direction.LOWER_IS_BETTER,
        description=(
            "Share of top 5 validators/miners in stake/hashrate. "
            "Lower concentration is better."
        ),
        mappings=(
            ScoreMapping(0, 25, 10, "Excellent (< 25%)"),
            ScoreMapping(25, 40, (8, 7), "Good (25-40%)"),
            ScoreMapping(40, 60, (6, 4), "Moderate (40-60%)"),
            ScoreMapping(60, 101, (3, 1), "Critical (> 60%)"),
        ),
    ),
    Criterion(
        id="A3",
        name="Client Independence",
        category=Category.CHAIN,
        description=(
            "Number of independently developed full-node implementations. "
            "Measures resilience against single-codebase bugs and single-entity control."
        ),
        mappings=(
            ScoreMapping(3, INF, (9, 10), "Excellent (>= 3 clients, none > 70%)"),
            ScoreMapping(2, 3, (6, 8), "Good (2 clients)"),
            ScoreMapping(0, 2, (2, 4), "Critical (1 dominant client)"),
        ),
    ),
    Criterion(
        id="A4",
        name="Node Geography & Hosting",
        category=Category.CHAIN,
        direction=Direction.LOWER_IS_BETTER,
        description=(
            "Geographic distribution of nodes and cloud hosting concentration. "
            "Lower cloud % is better."
        ),
        mappings=(
            ScoreMapping(0, 40, (10, 9), "Excellent (< 40% cloud)"),
            ScoreMapping(40, 70, (8, 5), "Moderate (40-70% cloud)"),
            ScoreMapping(70, 101, (4, 1), "Critical (> 70% cloud)"),
        ),
    ),
    Criterion(
        id="A5",
        name="Full Node Decentralization",
        category=Category.CHAIN,
        description=(
            "Number of independent full nodes validating the chain. More nodes "
            "means harder to attack and better censorship resistance."
        ),
        mappings=(
            ScoreMapping(10000, INF, 10, "Excellent (>= 10,000 nodes)"),
            ScoreMapping(5000, 10000, (8, 9), "Very Good (5,000-10,000)"),
            ScoreMapping(1000, 5000, (6, 7), "Good (1,000-5,000)"),
            ScoreMapping(500, 1000, (4, 5), "Moderate (500-1,000)"),
            ScoreMapping(100, 500, (2, 3), "Low (100-500)"),
            ScoreMapping(0, 100, (0, 1), "Critical (< 100 nodes)"),
        ),
    ),
)


# ============================================================
# CONTROL (B1-B6)
# ============================================================

CONTROL_CRITERIA: tuple[Criterion, ...] = (
    Criterion(
        id="B1",
        name="Corporate/Foundation Capture",
        category=Category.CONTROL,
        description=(
            "Is there a dominant company/foundation controlling roadmap, marketing "
            "and hiring? Can the project survive without them?"
        ),
        mappings=(
            ScoreMapping(9, 11, (9, 10), "No corporate owner (Bitcoin-style)"),
            ScoreMapping(6, 9, (6, 8), "Multiple orgs, none dominant"),
            ScoreMapping(2, 6, (2, 5), "One entity controls de facto"),
            ScoreMapping(0, 2, (0, 2), 'Full "CEO chain"'),
        ),
    ),
    Criterion(
        id="B2",
        name="Repo/Protocol Ownership",
        category=Category.CONTROL,
        description=(
            "Distribution of merge rights in core repositories (clients, specs). "
            "More distributed is better."
        ),
        mappings=(
            ScoreMapping(8, 11, (8, 10), "Many maintainers from different orgs"),
            ScoreMapping(5, 8, (5, 7), "Mix of company + community"),
            ScoreMapping(0, 5, (1, 4), "Almost only one company team"),
        ),
    ),
    Criterion(
        id="B3",
        name="Brand & Frontend Control",
        category=Category.CONTROL,
        description=(
            "Who owns brand, domains, main frontends, official wallets/apps? "
            "Decentralized ownership is better."
        ),
        mappings=(
            ScoreMapping(8, 11, (8, 10), "Brand in DAO/community + multiple frontends"),
            ScoreMapping(3, 8, (3, 7), "Foundation holds brand & main frontend"),
            ScoreMapping(0, 3, (1, 3), "Single corporate frontend, no alternatives"),
        ),
    ),
    Criterion(
        id="B4",
        name="Treasury & Upgrade Keys",
        category=Category.CONTROL,
        description=(
            "Composition of treasury/upgrade multisigs and admin keys. "
            "More independent signers is better."
        ),
        mappings=(
            ScoreMapping(10, INF, (8, 10), ">= 10 independent signers"),
            ScoreMapping(5, 10, (4, 7), "5-9 signers, partly team/VC"),
            ScoreMapping(0, 5, (1, 3), "2-4 core dev/founder signers"),
        ),
    ),
    Criterion(
        id="B5",
        name="Admin Halt Capability",
        category=Category.CONTROL,
        description=(
            "Can a single entity or small group unilaterally halt, freeze or "
            "censor the chain? This is a critical centralization risk."
        ),
        mappings=(
            ScoreMapping(9, 11, 10, "No halt capability - truly unstoppable"),
            ScoreMapping(5, 9, (5, 8), "Emergency halt requires broad consensus"),
            ScoreMapping(1, 5, (1, 4), "Foundation/team can coordinate halt"),
            ScoreMapping(0, 1, 0, "Single entity can halt/freeze chain"),
        ),
    ),
    Criterion(
        id="B6",
        name="Protocol Immutability",
        category=Category.CONTROL,
        direction=Direction.LOWER_IS_BETTER,
        description=(
            "Has the protocol made fundamental rule changes (consensus mechanism, "
            "monetary policy, contentious forks)?"
        ),
        mappings=(
            ScoreMapping(0, 1, 10, "No fundamental changes - immutable rules"),
            ScoreMapping(1, 2, (7, 8), "Minor changes, no consensus/monetary changes"),
            ScoreMapping(2, 4, (4, 6), "1-2 major changes (fork or consensus change)"),
            ScoreMapping(4, INF, (1, 3), 'Multiple major changes, "move fast" culture'),
        ),
    ),
)


# ============================================================
# FAIRNESS (C1-C3)
# ============================================================

_INSIDER_SHARE_MAPPINGS = (
    ScoreMapping(0, 20, (10, 8), "Insider < 20%"),
    ScoreMapping(20, 40, (7, 5), "Insider 20-40%"),
    ScoreMapping(40, 60, (4, 2), "Insider 40-60%"),
    ScoreMapping(60, 101, (2, 0), "Insider > 60%"),
)

FAIRNESS_CRITERIA: tuple[Criterion, ...] = (
    Criterion(
        id="C1",
        name="Launch Fairness / Premine",
        category=Category.FAIRNESS,
        direction=Direction.LOWER_IS_BETTER,
        description=(
            "Team/VC/Foundation premine and launch model (fair launch vs. sale/IDO). "
            "Less premine is better."
        ),
        mappings=(
            ScoreMapping(0, 5, (10, 9), "Fair launch, minimal premine (< 5%)"),
            ScoreMapping(5, 25, (8, 6), "Moderate pre-allocation (5-25%)"),
            ScoreMapping(25, 50, (5, 3), "High pre-allocation (25-50%)"),
            ScoreMapping(50, 101, (2, 0), "Majority pre-allocated (> 50%)"),
        ),
    ),
    Criterion(
        id="C2",
        name="Token Concentration",
        category=Category.FAIRNESS,
        direction=Direction.LOWER_IS_BETTER,
        description=(
            "Share of circulating supply held by insiders (team/VC/foundation). "
            "Less concentration is better."
        ),
        mappings=_INSIDER_SHARE_MAPPINGS,
    ),
    Criterion(
        id="C3",
        name="Governance Control",
        category=Category.FAIRNESS,
        direction=Direction.LOWER_IS_BETTER,
        description=(
            "Share of governance voting power held by insiders. 100% means no "
            "token governance. Less insider control is better."
        ),
        mappings=_INSIDER_SHARE_MAPPINGS,
    ),
)


CRITERIA_BY_CATEGORY: dict[Category, tuple[Criterion, ...]] = {
    Category.CHAIN: CHAIN_CRITERIA,
    Category.CONTROL: CONTROL_CRITERIA,
    Category.FAIRNESS: FAIRNESS_CRITERIA,
}


# ============================================================
# LOOKUPS
# ============================================================

def get_all_criteria() -> list[Criterion]:
    """Every criterion, chain first, then control, then fairness."""
    return [*CHAIN_CRITERIA, *CONTROL_CRITERIA, *FAIRNESS_CRITERIA]


def get_criteria_by_category(category: Category) -> list[Criterion]:
    return list(CRITERIA_BY_CATEGORY[Category(category)])


def get_criterion_by_id(criterion_id: str) -> Optional[Criterion]:
    for criterion in get_all_criteria():
        if criterion.id == criterion_id:
            return criterion
    return None
