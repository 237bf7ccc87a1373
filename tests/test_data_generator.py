from datetime import timedelta

from models.job import PRIORITY_TIERS, CUSTOMER_TIERS
from utils.data_generator import (
    MATERIAL_TYPES,
    create_sample_request,
    export_jobs_to_csv,
    generate_machines,
    generate_random_jobs,
    load_jobs_from_csv,
)
from workflows.validation import validate_request

from conftest import NOW, make_job


def test_seeded_queue_is_reproducible():
    first = generate_random_jobs(15, now=NOW, seed=3)
    second = generate_random_jobs(15, now=NOW, seed=3)

    assert first == second
    assert [job.job_id for job in first][:3] == ["J001", "J002", "J003"]


def test_generated_jobs_stay_in_range():
    for job in generate_random_jobs(40, now=NOW, seed=11):
        low, high = MATERIAL_TYPES[job.material_type]['thickness']
        assert low <= job.thickness <= high
        assert job.estimated_duration >= 10
        assert job.priority in PRIORITY_TIERS
        assert job.customer_importance in CUSTOMER_TIERS
        assert NOW + timedelta(hours=4) <= job.due_date <= NOW + timedelta(days=10)


def test_every_material_has_a_machine():
    machines = generate_machines()

    for material in MATERIAL_TYPES:
        assert any(material in m.material_compatibility for m in machines)


def test_sample_request_is_valid():
    request = create_sample_request(8, now=NOW, seed=5)

    validate_request(request)
    stock = {m.material_type: m.available_quantity for m in request.resources.material_availability}
    for material in {job.material_type for job in request.jobs}:
        demand = sum(j.part_count for j in request.jobs if j.material_type == material)
        assert stock[material] == demand


def test_csv_round_trip(tmp_path):
    jobs = generate_random_jobs(6, now=NOW, seed=2)
    jobs.append(make_job("J099", dependencies=["J001", "J002"]))
    path = tmp_path / "queue.csv"

    export_jobs_to_csv(jobs, str(path))
    loaded = load_jobs_from_csv(str(path))

    assert loaded == jobs
