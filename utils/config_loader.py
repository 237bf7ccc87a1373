"""
Configuration Loader - Load and manage scheduling policies

This module provides functions to load configuration from YAML/JSON files
and turn it into the objects the engine runs on.

Key Features:
    - Load the default or a custom scheduling policy
    - Merge file settings over the built-in defaults
    - Save a policy back to YAML
    - Load an optimization request bundle from YAML/JSON
"""

import yaml
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

from models.request import OptimizationRequest
from models.policy import (
    SchedulingPolicy,
    CostRates,
    RiskThresholds,
    ScenarioProfile,
    RealTimeAdjustments,
)

logger = logging.getLogger(__name__)

DEFAULT_POLICY_PATH = Path(__file__).parent.parent / 'config' / 'default_policy.yaml'


def load_yaml(file_path: str) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        file_path: Path to YAML file

    Returns:
        Dictionary with configuration data
    """
    with open(file_path, 'r') as f:
        return yaml.safe_load(f) or {}


def load_json(file_path: str) -> Dict[str, Any]:
    """
    Load JSON configuration file.

    Args:
        file_path: Path to JSON file

    Returns:
        Dictionary with configuration data
    """
    with open(file_path, 'r') as f:
        return json.load(f)


def _load_file(path) -> Dict[str, Any]:
    if str(path).endswith('.json'):
        return load_json(str(path))
    return load_yaml(str(path))


def _dataclass_kwargs(cls, section: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Keep only the keys ``cls`` declares; unknown keys are logged and dropped."""
    section = section or {}
    known = set(cls.__dataclass_fields__)
    unknown = sorted(set(section) - known)
    if unknown:
        logger.warning("Ignoring unknown %s settings: %s", cls.__name__, ", ".join(unknown))
    return {k: v for k, v in section.items() if k in known}


def load_policy_from_config(config: Dict[str, Any]) -> SchedulingPolicy:
    """
    Create a SchedulingPolicy from a configuration dictionary.

    Missing sections and keys keep their built-in defaults.

    Args:
        config: Configuration dictionary

    Returns:
        SchedulingPolicy object
    """
    defaults = SchedulingPolicy()

    # Priority scoring
    priority = config.get('priority', {})
    bands = priority.get('urgency_bands')
    urgency_bands = (
        [(float(b['hours']), float(b['weight'])) for b in bands]
        if bands is not None else defaults.urgency_bands
    )

    # Sequencing
    scheduling = config.get('scheduling', {})

    # Analysis
    analysis = config.get('analysis', {})

    scenario_configs = config.get('scenarios')
    scenarios = (
        [
            ScenarioProfile(
                name=s['name'],
                description=s.get('description', ''),
                weights=s.get('weights'),
                tradeoffs=list(s.get('tradeoffs', [])),
            )
            for s in scenario_configs
        ]
        if scenario_configs is not None else defaults.scenarios
    )

    return SchedulingPolicy(
        priority_weights={
            **defaults.priority_weights, **priority.get('tier_weights', {})
        },
        default_priority_weight=float(
            priority.get('default_tier_weight', defaults.default_priority_weight)
        ),
        customer_weights={
            **defaults.customer_weights, **priority.get('customer_weights', {})
        },
        default_customer_weight=float(
            priority.get('default_customer_weight', defaults.default_customer_weight)
        ),
        urgency_bands=urgency_bands,
        default_urgency_weight=float(
            priority.get('default_urgency_weight', defaults.default_urgency_weight)
        ),
        urgency_multiplier=float(priority.get('urgency_multiplier', defaults.urgency_multiplier)),
        profit_multiplier=float(priority.get('profit_multiplier', defaults.profit_multiplier)),
        min_buffer_minutes=float(
            scheduling.get('min_buffer_minutes', defaults.min_buffer_minutes)
        ),
        buffer_ratio=float(scheduling.get('buffer_ratio', defaults.buffer_ratio)),
        unassignable_policy=scheduling.get('unassignable_policy', defaults.unassignable_policy),
        enforce_dependencies=bool(
            scheduling.get('enforce_dependencies', defaults.enforce_dependencies)
        ),
        bottleneck_utilization=float(
            analysis.get('bottleneck_utilization', defaults.bottleneck_utilization)
        ),
        setup_share_threshold=float(
            analysis.get('setup_share_threshold', defaults.setup_share_threshold)
        ),
        cost=CostRates(**_dataclass_kwargs(CostRates, config.get('cost'))),
        risk=RiskThresholds(**_dataclass_kwargs(RiskThresholds, config.get('risk'))),
        scenarios=scenarios,
        real_time_adjustments=RealTimeAdjustments(
            **_dataclass_kwargs(RealTimeAdjustments, config.get('real_time_adjustments'))
        ),
    )


def load_policy(config_path: Optional[str] = None) -> SchedulingPolicy:
    """
    Load a scheduling policy from file.

    If no path provided, loads default_policy.yaml from config directory.

    Args:
        config_path: Optional path to a YAML or JSON policy file

    Returns:
        SchedulingPolicy object
    """
    if config_path is None:
        config_path = DEFAULT_POLICY_PATH

    logger.info("Loading scheduling policy from %s", config_path)
    return load_policy_from_config(_load_file(config_path))


def policy_to_config(policy: SchedulingPolicy) -> Dict[str, Any]:
    """Inverse of ``load_policy_from_config``."""
    return {
        'priority': {
            'tier_weights': dict(policy.priority_weights),
            'default_tier_weight': policy.default_priority_weight,
            'customer_weights': dict(policy.customer_weights),
            'default_customer_weight': policy.default_customer_weight,
            'urgency_bands': [
                {'hours': hours, 'weight': weight} for hours, weight in policy.urgency_bands
            ],
            'default_urgency_weight': policy.default_urgency_weight,
            'urgency_multiplier': policy.urgency_multiplier,
            'profit_multiplier': policy.profit_multiplier,
        },
        'scheduling': {
            'min_buffer_minutes': policy.min_buffer_minutes,
            'buffer_ratio': policy.buffer_ratio,
            'unassignable_policy': policy.unassignable_policy,
            'enforce_dependencies': policy.enforce_dependencies,
        },
        'analysis': {
            'bottleneck_utilization': policy.bottleneck_utilization,
            'setup_share_threshold': policy.setup_share_threshold,
        },
        'cost': {
            'cost_per_job': policy.cost.cost_per_job,
            'overtime_job_threshold': policy.cost.overtime_job_threshold,
            'overtime_cost_per_job': policy.cost.overtime_cost_per_job,
            'setup_cost_per_minute': policy.cost.setup_cost_per_minute,
            'optimization_benefit_per_job': policy.cost.optimization_benefit_per_job,
            'breakdown_percentages': dict(policy.cost.breakdown_percentages),
        },
        'risk': dict(vars(policy.risk)),
        'scenarios': [s.to_dict() for s in policy.scenarios],
        'real_time_adjustments': {
            'dynamic_rescheduling': policy.real_time_adjustments.dynamic_rescheduling,
            'trigger_conditions': list(policy.real_time_adjustments.trigger_conditions),
            'adjustment_strategies': list(policy.real_time_adjustments.adjustment_strategies),
            'monitoring_parameters': list(policy.real_time_adjustments.monitoring_parameters),
        },
    }


def save_policy(policy: SchedulingPolicy, output_path: str):
    """
    Save a scheduling policy to YAML file.

    Args:
        policy: Policy to save
        output_path: Path to output file
    """
    with open(output_path, 'w') as f:
        yaml.dump(policy_to_config(policy), f, default_flow_style=False, sort_keys=False)
    logger.info("Saved scheduling policy to %s", output_path)


def load_request(request_path: str) -> OptimizationRequest:
    """
    Load an optimization request bundle from a YAML or JSON file.

    Args:
        request_path: Path to the request file

    Returns:
        OptimizationRequest object
    """
    return OptimizationRequest.from_dict(_load_file(request_path))


# Example usage
if __name__ == "__main__":
    policy = load_policy()

    print("Loaded Scheduling Policy:")
    print(f"Unassignable policy: {policy.unassignable_policy}")
    print(f"\nPriority weights:")
    for tier, weight in policy.priority_weights.items():
        print(f"  {tier}: {weight}")
    print(f"\nScenarios: {[s.name for s in policy.scenarios]}")
