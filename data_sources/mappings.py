"""
Criterion to Data Source Mappings.

Default sources for every scoring criterion, plus the per-project
overrides that replace a criterion's primary source.
"""

import math

from data_sources.models import (
    CriterionDataMapping,
    DataSourceConfig,
    DataSourceProvider,
    ProjectDataSources,
    ProjectIdentifiers,
    UpdateFrequency,
)


MANUAL = DataSourceConfig(provider=DataSourceProvider.MANUAL)


def org_dominance_to_score(raw: float) -> float:
    """Top contributing org share (%) -> 0-10 input, higher diversity scores higher."""
    return float(math.floor(10 - raw / 10 + 0.5))


CRITERION_MAPPINGS: tuple[CriterionDataMapping, ...] = (
    # ------------------------------------------------------------------
    # Chain (A1-A5)
    # ------------------------------------------------------------------
    CriterionDataMapping(
        criterion_id="A1",  # Nakamoto Coefficient
        primary=DataSourceConfig(
            provider=DataSourceProvider.CHAINSPECT,
            endpoint="/chain/{chainId}",
            extractor="nakamoto_coefficient",
        ),
        fallbacks=(MANUAL,),
        update_frequency=UpdateFrequency.WEEKLY,
        chain_specific=True,
    ),
    CriterionDataMapping(
        criterion_id="A2",  # Validator/Miner Concentration
        primary=DataSourceConfig(
            provider=DataSourceProvider.RATED,
            endpoint="/v1/eth/operators",
            extractor="top5_concentration",
        ),
        fallbacks=(
            DataSourceConfig(provider=DataSourceProvider.BLOCKCHAIN, endpoint="/pools"),
            MANUAL,
        ),
        update_frequency=UpdateFrequency.WEEKLY,
        chain_specific=True,
    ),
    CriterionDataMapping(
        criterion_id="A3",  # Client Independence
        primary=DataSourceConfig(
            provider=DataSourceProvider.ETHERNODES,
            endpoint="/clients",
            extractor="unique_clients",
        ),
        fallbacks=(MANUAL,),
        update_frequency=UpdateFrequency.WEEKLY,
        chain_specific=True,
    ),
    CriterionDataMapping(
        criterion_id="A4",  # Node Geography & Hosting
        primary=DataSourceConfig(
            provider=DataSourceProvider.BITNODES,
            endpoint="/api/v1/snapshots/latest/",
            extractor="cloud_percentage",
        ),
        fallbacks=(
            DataSourceConfig(provider=DataSourceProvider.ETHERNODES, endpoint="/countries"),
            MANUAL,
        ),
        update_frequency=UpdateFrequency.WEEKLY,
        chain_specific=True,
    ),
    CriterionDataMapping(
        criterion_id="A5",  # Full Node Decentralization
        primary=DataSourceConfig(
            provider=DataSourceProvider.BITNODES,
            endpoint="/api/v1/snapshots/latest/",
            extractor="total_nodes",
        ),
        fallbacks=(
            DataSourceConfig(provider=DataSourceProvider.ETHERNODES, endpoint="/nodes"),
            MANUAL,
        ),
        update_frequency=UpdateFrequency.DAILY,
        chain_specific=True,
    ),

    # ------------------------------------------------------------------
    # Control (B1-B6)
    # ------------------------------------------------------------------
    CriterionDataMapping(
        criterion_id="B1",  # Corporate/Foundation Capture
        primary=DataSourceConfig(
            provider=DataSourceProvider.GITHUB,
            endpoint="/repos/{org}/{repo}/contributors",
            extractor="org_dominance",
            transform=org_dominance_to_score,
        ),
        fallbacks=(MANUAL,),
        update_frequency=UpdateFrequency.WEEKLY,
        chain_specific=True,
    ),
    CriterionDataMapping(
        criterion_id="B2",  # Repo/Protocol Ownership
        primary=DataSourceConfig(
            provider=DataSourceProvider.GITHUB,
            endpoint="/repos/{org}/{repo}/stats/contributors",
            extractor="maintainer_diversity",
        ),
        fallbacks=(MANUAL,),
        update_frequency=UpdateFrequency.WEEKLY,
        chain_specific=True,
    ),
    CriterionDataMapping(
        criterion_id="B3",  # Brand & Frontend Control, no API for brand ownership
        primary=MANUAL,
        update_frequency=UpdateFrequency.STATIC,
    ),
    CriterionDataMapping(
        criterion_id="B4",  # Treasury & Upgrade Keys
        primary=MANUAL,
        update_frequency=UpdateFrequency.STATIC,
    ),
    CriterionDataMapping(
        criterion_id="B5",  # Admin Halt Capability
        primary=MANUAL,
        update_frequency=UpdateFrequency.STATIC,
    ),
    CriterionDataMapping(
        criterion_id="B6",  # Protocol Immutability
        primary=MANUAL,
        update_frequency=UpdateFrequency.STATIC,
    ),

    # ------------------------------------------------------------------
    # Fairness (C1-C3)
    # ------------------------------------------------------------------
    CriterionDataMapping(
        criterion_id="C1",  # Launch Fairness / Premine, historical
        primary=MANUAL,
        update_frequency=UpdateFrequency.STATIC,
    ),
    CriterionDataMapping(
        criterion_id="C2",  # Token Concentration
        primary=DataSourceConfig(
            provider=DataSourceProvider.COINGECKO,
            endpoint="/coins/{id}/holders",
            extractor="top_holders_concentration",
        ),
        fallbacks=(MANUAL,),
        update_frequency=UpdateFrequency.WEEKLY,
        chain_specific=True,
    ),
    CriterionDataMapping(
        criterion_id="C3",  # Governance Control
        primary=DataSourceConfig(
            provider=DataSourceProvider.SNAPSHOT,
            endpoint="/graphql",
            extractor="voting_power_concentration",
        ),
        fallbacks=(MANUAL,),
        update_frequency=UpdateFrequency.WEEKLY,
        chain_specific=True,
    ),
)


PROJECT_SOURCES: tuple[ProjectDataSources, ...] = (
    ProjectDataSources(
        project_id="bitcoin",
        identifiers=ProjectIdentifiers(
            github_org="bitcoin",
            github_repos=("bitcoin",),
        ),
        overrides={
            "A1": DataSourceConfig(
                provider=DataSourceProvider.BLOCKCHAIN,
                endpoint="/pools",
                extractor="nakamoto_coefficient",
            ),
            "A2": DataSourceConfig(
                provider=DataSourceProvider.BLOCKCHAIN,
                endpoint="/pools",
                extractor="top5_concentration",
            ),
            "A4": DataSourceConfig(
                provider=DataSourceProvider.BITNODES,
                endpoint="/api/v1/snapshots/latest/",
                extractor="cloud_percentage",
            ),
            # No on-chain governance
            "C3": MANUAL,
        },
    ),
    ProjectDataSources(
        project_id="ethereum",
        identifiers=ProjectIdentifiers(
            github_org="ethereum",
            github_repos=("go-ethereum", "consensus-specs"),
            chain_id="ethereum",
        ),
        overrides={
            "A2": DataSourceConfig(
                provider=DataSourceProvider.RATED,
                endpoint="/v1/eth/operators",
                extractor="top5_concentration",
            ),
            "A3": DataSourceConfig(provider=DataSourceProvider.ETHERNODES, endpoint="/clients"),
            "A4": DataSourceConfig(provider=DataSourceProvider.ETHERNODES, endpoint="/countries"),
            "A5": DataSourceConfig(provider=DataSourceProvider.ETHERNODES, endpoint="/nodes"),
        },
    ),
    ProjectDataSources(
        project_id="solana",
        identifiers=ProjectIdentifiers(
            github_org="solana-labs",
            github_repos=("solana", "solana-program-library"),
            chain_id="solana",
            snapshot_space="realms.solana",
        ),
        overrides={
            "A1": DataSourceConfig(
                provider=DataSourceProvider.SOLANA_RPC,
                endpoint="getVoteAccounts",
                extractor="nakamoto_coefficient",
            ),
            "A2": DataSourceConfig(
                provider=DataSourceProvider.SOLANA_RPC,
                endpoint="getVoteAccounts",
                extractor="top5_concentration",
            ),
            "A3": DataSourceConfig(
                provider=DataSourceProvider.SOLANA_RPC,
                endpoint="getClusterNodes",
                extractor="client_versions",
            ),
            "A4": DataSourceConfig(
                provider=DataSourceProvider.SOLANABEACH,
                endpoint="/v1/validators",
                extractor="datacenter_concentration",
            ),
            "A5": DataSourceConfig(
                provider=DataSourceProvider.SOLANA_RPC,
                endpoint="getClusterNodes",
                extractor="total_nodes",
            ),
            # Governance runs through Realms, which needs a custom integration
            "C3": MANUAL,
        },
    ),
    ProjectDataSources(
        project_id="cosmos",
        identifiers=ProjectIdentifiers(
            github_org="cosmos",
            github_repos=("gaia",),
            chain_id="cosmoshub",
        ),
        overrides={
            "A1": DataSourceConfig(
                provider=DataSourceProvider.COSMOS_LCD,
                endpoint="/cosmos/staking/v1beta1/validators",
                extractor="nakamoto_coefficient",
            ),
            "A2": DataSourceConfig(
                provider=DataSourceProvider.COSMOS_LCD,
                endpoint="/cosmos/staking/v1beta1/validators",
                extractor="top5_concentration",
            ),
        },
    ),
    ProjectDataSources(
        project_id="sui",
        identifiers=ProjectIdentifiers(github_org="MystenLabs", github_repos=("sui",)),
        overrides={
            "A1": DataSourceConfig(
                provider=DataSourceProvider.SUI_RPC,
                endpoint="suix_getLatestSuiSystemState",
                extractor="nakamoto_coefficient",
            ),
            "A2": DataSourceConfig(
                provider=DataSourceProvider.SUI_RPC,
                endpoint="suix_getLatestSuiSystemState",
                extractor="top5_concentration",
            ),
        },
    ),
    ProjectDataSources(
        project_id="aptos",
        identifiers=ProjectIdentifiers(github_org="aptos-labs", github_repos=("aptos-core",)),
        overrides={
            "A1": DataSourceConfig(
                provider=DataSourceProvider.APTOS,
                endpoint="/accounts/0x1/resource/0x1::stake::ValidatorSet",
                extractor="nakamoto_coefficient",
            ),
            "A2": DataSourceConfig(
                provider=DataSourceProvider.APTOS,
                endpoint="/accounts/0x1/resource/0x1::stake::ValidatorSet",
                extractor="top5_concentration",
            ),
        },
    ),
    ProjectDataSources(
        project_id="filecoin",
        identifiers=ProjectIdentifiers(github_org="filecoin-project", github_repos=("lotus",)),
        overrides={
            "A1": DataSourceConfig(
                provider=DataSourceProvider.FILFOX,
                endpoint="/miner/top-miners/power",
                extractor="nakamoto_coefficient",
            ),
            "A2": DataSourceConfig(
                provider=DataSourceProvider.FILFOX,
                endpoint="/miner/top-miners/power",
                extractor="top5_concentration",
            ),
        },
    ),
)
