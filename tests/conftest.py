from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from models.job import Job
from models.machine import Machine, ThicknessRange
from models.constraints import OptimizationGoals, ResourceConstraints
from models.request import OptimizationRequest
from models.policy import SchedulingPolicy

# Monday morning, start of the working day
NOW = datetime(2026, 3, 2, 8, 0)


def make_job(job_id="J001", **overrides) -> Job:
    fields = dict(
        job_id=job_id,
        job_name=f"Bracket {job_id}",
        priority="normal",
        due_date=NOW + timedelta(days=5),
        estimated_duration=60.0,
        material_type="mild_steel",
        thickness=5.0,
        setup_time=10.0,
        part_count=10,
        customer_importance="standard",
        profit_margin=20.0,
    )
    fields.update(overrides)
    return Job(**fields)


def make_machine(machine_id="M1", **overrides) -> Machine:
    fields = dict(
        machine_id=machine_id,
        machine_name=f"Laser {machine_id}",
        max_power=4000.0,
        material_compatibility=["mild_steel", "stainless_steel"],
        thickness_range=ThicknessRange(0.5, 20.0),
    )
    fields.update(overrides)
    return Machine(**fields)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def policy():
    return SchedulingPolicy()


@pytest.fixture
def goals():
    return OptimizationGoals()


@pytest.fixture
def machines():
    return [
        make_machine("M1"),
        make_machine(
            "M2",
            material_compatibility=["mild_steel", "aluminum"],
            thickness_range=ThicknessRange(0.5, 10.0),
            setup_time_multiplier=1.5,
        ),
    ]


@pytest.fixture
def jobs():
    return [
        make_job("J001"),
        make_job("J002", priority="critical", due_date=NOW + timedelta(hours=6)),
        make_job("J003", material_type="aluminum", thickness=3.0, estimated_duration=45.0),
        make_job("J004", material_type="stainless_steel", thickness=12.0, setup_time=20.0,
                 customer_importance="vip"),
    ]


@pytest.fixture
def request_bundle(jobs, machines):
    return OptimizationRequest(
        jobs=jobs,
        machines=machines,
        resources=ResourceConstraints(available_operators=3),
    )


class FakeChatModel:
    """Records the messages it is sent and answers with a canned reply."""

    def __init__(self, reply="All jobs ship on time."):
        self.reply = reply
        self.calls = []

    def invoke(self, messages):
        self.calls.append(messages)
        return SimpleNamespace(content=self.reply)
