"""
Test Data Generator - Create realistic laser-cutting queues for testing

This module provides functions to generate test data including:
- Randomly generated jobs
- A standard mixed machine pool
- Complete sample optimization requests for demonstration
- CSV export/import of job queues
"""

import random
import logging
from datetime import datetime, timedelta, time
from typing import List, Optional
import pandas as pd
from pathlib import Path

from models.job import Job, PRIORITY_TIERS, CUSTOMER_TIERS
from models.machine import Machine, ThicknessRange
from models.constraints import (
    OperationalConstraints,
    ResourceConstraints,
    OptimizationGoals,
    OperatorShift,
    MaterialAvailability,
    ToolingAvailability,
)
from models.request import OptimizationRequest

logger = logging.getLogger(__name__)


# Material configurations: typical cutting minutes and thickness range (mm)
MATERIAL_TYPES = {
    'mild_steel': {'avg_time': 90, 'variance': 40, 'thickness': (1.0, 20.0), 'setup': 15},
    'stainless_steel': {'avg_time': 75, 'variance': 30, 'thickness': (1.0, 12.0), 'setup': 20},
    'aluminum': {'avg_time': 45, 'variance': 20, 'thickness': (1.0, 10.0), 'setup': 10},
}

PRIORITY_PROBABILITIES = [0.05, 0.1, 0.25, 0.45, 0.15]  # aligned with PRIORITY_TIERS
CUSTOMER_PROBABILITIES = [0.6, 0.3, 0.1]                 # aligned with CUSTOMER_TIERS

CSV_COLUMNS = [
    'job_id', 'job_name', 'priority', 'due_date', 'estimated_duration', 'material_type',
    'thickness', 'setup_time', 'part_count', 'customer_importance', 'profit_margin',
    'dependencies',
]


def generate_random_jobs(
    num_jobs: int,
    now: Optional[datetime] = None,
    seed: Optional[int] = None
) -> List[Job]:
    """
    Generate random laser-cutting jobs for testing.

    Args:
        num_jobs: Number of jobs to generate
        now: Reference time due dates are drawn from (defaults to the clock)
        seed: Seed for a reproducible queue

    Returns:
        List of Job objects
    """
    rng = random.Random(seed)
    if now is None:
        now = datetime.now()

    jobs = []
    for i in range(num_jobs):
        job_id = f"J{i+1:03d}"  # J001, J002, etc.

        material = rng.choice(list(MATERIAL_TYPES.keys()))
        config = MATERIAL_TYPES[material]

        duration = config['avg_time'] + rng.randint(-config['variance'], config['variance'])
        duration = max(10, duration)  # Minimum 10 minutes

        low, high = config['thickness']
        thickness = round(rng.uniform(low, high), 1)

        # Due between 4 hours and 10 days out, to the minute
        due_minutes = rng.randint(4 * 60, 10 * 24 * 60)
        due_date = (now + timedelta(minutes=due_minutes)).replace(second=0, microsecond=0)

        jobs.append(Job(
            job_id=job_id,
            job_name=f"{material.replace('_', ' ').title()} panel {i+1}",
            priority=rng.choices(PRIORITY_TIERS, PRIORITY_PROBABILITIES)[0],
            due_date=due_date,
            estimated_duration=float(duration),
            material_type=material,
            thickness=thickness,
            setup_time=float(config['setup'] + rng.choice([0, 5, 10])),
            part_count=rng.randint(1, 200),
            customer_importance=rng.choices(CUSTOMER_TIERS, CUSTOMER_PROBABILITIES)[0],
            profit_margin=float(rng.randint(5, 40)),
        ))

    return jobs


def generate_machines() -> List[Machine]:
    """
    Standard three-machine pool: a heavy fiber laser, a thin-sheet fiber
    laser and a CO2 laser.
    """
    return [
        Machine(
            machine_id="LC-01",
            machine_name="Fiber 6kW",
            max_power=6000,
            material_compatibility=['mild_steel', 'stainless_steel', 'aluminum'],
            thickness_range=ThicknessRange(0.5, 25.0),
            efficiency=95.0,
            setup_time_multiplier=1.0,
            operator_skill_level="expert",
        ),
        Machine(
            machine_id="LC-02",
            machine_name="Fiber 3kW",
            max_power=3000,
            material_compatibility=['mild_steel', 'stainless_steel', 'aluminum'],
            thickness_range=ThicknessRange(0.5, 12.0),
            efficiency=90.0,
            setup_time_multiplier=1.1,
        ),
        Machine(
            machine_id="LC-03",
            machine_name="CO2 4kW",
            max_power=4000,
            material_compatibility=['mild_steel', 'stainless_steel'],
            thickness_range=ThicknessRange(1.0, 20.0),
            efficiency=82.0,
            setup_time_multiplier=1.3,
            operator_skill_level="basic",
        ),
    ]


def create_sample_request(
    num_jobs: int = 10,
    now: Optional[datetime] = None,
    seed: Optional[int] = None
) -> OptimizationRequest:
    """
    Sample request: random jobs, the standard machine pool, two shifts and
    material stock for every material in the queue.
    """
    jobs = generate_random_jobs(num_jobs, now=now, seed=seed)

    demand = {}
    for job in jobs:
        demand[job.material_type] = demand.get(job.material_type, 0) + job.part_count

    return OptimizationRequest(
        jobs=jobs,
        machines=generate_machines(),
        operational_constraints=OperationalConstraints(),
        goals=OptimizationGoals(),
        resources=ResourceConstraints(
            available_operators=3,
            operator_shifts=[
                OperatorShift("day", time(6, 0), time(14, 0), 2),
                OperatorShift("late", time(14, 0), time(22, 0), 1),
            ],
            material_availability=[
                MaterialAvailability(material, float(quantity), lead_time=2.0)
                for material, quantity in sorted(demand.items())
            ],
            tooling_availability=[
                ToolingAvailability("nozzle_1.5mm", True, 5.0),
                ToolingAvailability("nozzle_3.0mm", True, 5.0),
            ],
        ),
    )


def export_jobs_to_csv(jobs: List[Job], output_path: str):
    """
    Export jobs to CSV file for import into dashboard.

    Dependencies are joined with ';'.

    Args:
        jobs: List of Job objects
        output_path: Path to save CSV
    """
    data = []
    for job in jobs:
        row = job.to_dict()
        row['dependencies'] = ';'.join(job.dependencies)
        data.append(row)

    df = pd.DataFrame(data, columns=CSV_COLUMNS)
    df.to_csv(output_path, index=False)
    logger.info("Exported %d jobs to %s", len(jobs), output_path)


def load_jobs_from_csv(input_path: str) -> List[Job]:
    """
    Load a job queue written by ``export_jobs_to_csv`` (or by hand).

    Args:
        input_path: Path to the CSV file

    Returns:
        List of Job objects
    """
    df = pd.read_csv(
        input_path,
        dtype={'job_id': str, 'dependencies': str},
        keep_default_na=False,
    )

    jobs = []
    for record in df.to_dict(orient='records'):
        deps = record.get('dependencies') or ''
        record['dependencies'] = [d for d in str(deps).split(';') if d]
        jobs.append(Job.from_dict(record))

    logger.info("Loaded %d jobs from %s", len(jobs), input_path)
    return jobs


# Example usage and CLI
if __name__ == "__main__":
    print("="*60)
    print("TEST DATA GENERATOR")
    print("="*60)

    request = create_sample_request(12, seed=42)
    print(f"\n{request}")
    for job in request.jobs:
        print(f"  {job}")

    output_dir = Path(__file__).parent.parent / 'data'
    output_dir.mkdir(exist_ok=True)

    export_jobs_to_csv(request.jobs, str(output_dir / 'sample_queue.csv'))
    print(f"\nSample queue exported to {output_dir}")
