"""
LangGraph Orchestration - Job Queue Optimization Workflow

This module implements the LangGraph workflow that runs every engine stage
in a deterministic, traceable pipeline.

Workflow Steps:
    1. Schedule Builder sequences the queue on per-machine timelines
    2. Performance, cost, risk and resource analyses
    3. Customer impact and schedule audit
    4. Baseline comparison and alternative scenarios
    5. Rule-based insights, alerts and recommendations
    6. Result assembly
    7. Optional Supervisor executive summary

Uses LangGraph for state management and LangSmith for full traceability.
"""

import logging
import time as time_module
from datetime import datetime
from typing import List, Optional, TypedDict

from langgraph.graph import StateGraph, END
from langsmith import traceable

from models.request import OptimizationRequest
from models.policy import SchedulingPolicy
from models.schedule import Schedule
from models.analysis import (
    PerformanceMetrics,
    ResourceUtilization,
    CostAnalysis,
    RiskAssessment,
    Scenario,
    OptimizationInsights,
    AlertsAndRecommendations,
    CustomerImpact,
    ScheduleValidation,
    OptimizationResult,
)

from agents.schedule_builder import ScheduleBuilder
from agents.performance_analyzer import PerformanceAnalyzer
from agents.cost_model import CostModel
from agents.risk_assessor import RiskAssessor
from agents.resource_analyzer import ResourceAnalyzer
from agents.customer_impact import CustomerImpactAnalyzer
from agents.constraint_agent import ConstraintAgent
from agents.scenario_generator import ScenarioGenerator
from agents.insight_engine import InsightEngine, InsightContext
from agents.supervisor import SupervisorAgent
from utils.baseline_scheduler import BaselineScheduler
from workflows.validation import validate_request

logger = logging.getLogger(__name__)


class OptimizationState(TypedDict, total=False):
    """
    State object passed between stages in the workflow.

    LangGraph uses this to track progress through the optimization pipeline.
    Every node returns only the keys it produces.
    """
    # Inputs
    request: OptimizationRequest
    now: datetime

    # Intermediate results
    schedule: Schedule
    performance: PerformanceMetrics
    costs: CostAnalysis
    risk: RiskAssessment
    resources: ResourceUtilization
    customer_impact: CustomerImpact
    validation: ScheduleValidation
    baseline_elapsed: float
    scenarios: List[Scenario]
    insights: OptimizationInsights
    alerts: AlertsAndRecommendations
    recommendations: List[str]

    # Final output
    result: OptimizationResult


class OptimizationOrchestrator:
    """
    LangGraph-based orchestrator for the job queue optimizer.

    This class wires all engine components into one linear pipeline with
    full LangSmith tracing. The optional supervisor adds an LLM narrative
    after the result is assembled.
    """

    def __init__(
        self,
        policy: Optional[SchedulingPolicy] = None,
        supervisor: Optional[SupervisorAgent] = None
    ):
        """
        Initialize the orchestrator with all components.

        Args:
            policy: Scheduling policy (built-in defaults when omitted)
            supervisor: Optional LLM supervisor for the executive summary
        """
        self.policy = policy or SchedulingPolicy()
        self.supervisor = supervisor

        self.builder = ScheduleBuilder(self.policy)
        self.performance_analyzer = PerformanceAnalyzer()
        self.cost_model = CostModel(self.policy)
        self.risk_assessor = RiskAssessor(self.policy)
        self.resource_analyzer = ResourceAnalyzer(self.policy)
        self.customer_analyzer = CustomerImpactAnalyzer(self.policy)
        self.constraint_agent = ConstraintAgent()
        self.baseline = BaselineScheduler(self.policy)
        self.scenario_generator = ScenarioGenerator(
            self.policy, self.builder, self.performance_analyzer, self.cost_model
        )
        self.insight_engine = InsightEngine()

        # Build LangGraph workflow
        self.workflow = self._build_workflow()

    def _build_workflow(self):
        """
        Build the LangGraph state graph defining the stage order.

        Returns:
            Compiled StateGraph
        """
        graph = StateGraph(OptimizationState)

        steps = [
            ("build_schedule", self._build_schedule),
            ("analyze_performance", self._analyze_performance),
            ("analyze_costs", self._analyze_costs),
            ("assess_risk", self._assess_risk),
            ("analyze_resources", self._analyze_resources),
            ("analyze_customer_impact", self._analyze_customer_impact),
            ("validate_schedule", self._validate_schedule),
            ("run_baseline", self._run_baseline),
            ("generate_scenarios", self._generate_scenarios),
            ("generate_insights", self._generate_insights),
            ("assemble_result", self._assemble_result),
        ]
        if self.supervisor is not None:
            steps.append(("explain_result", self._explain_result))

        for name, node in steps:
            graph.add_node(name, node)

        # Define edges (linear flow)
        graph.set_entry_point(steps[0][0])
        for (current, _), (following, _) in zip(steps, steps[1:]):
            graph.add_edge(current, following)
        graph.add_edge(steps[-1][0], END)

        return graph.compile()

    @traceable(name="Schedule Builder")
    def _build_schedule(self, state: OptimizationState) -> OptimizationState:
        request = state["request"]
        schedule = self.builder.build(request.jobs, request.machines, request.goals, state["now"])
        return {"schedule": schedule}

    @traceable(name="Performance Analysis")
    def _analyze_performance(self, state: OptimizationState) -> OptimizationState:
        performance = self.performance_analyzer.analyze(
            state["schedule"], state["request"].machines, state["now"]
        )
        return {"performance": performance}

    @traceable(name="Cost Analysis")
    def _analyze_costs(self, state: OptimizationState) -> OptimizationState:
        return {"costs": self.cost_model.analyze(state["request"].jobs)}

    @traceable(name="Risk Assessment")
    def _assess_risk(self, state: OptimizationState) -> OptimizationState:
        request = state["request"]
        risk = self.risk_assessor.assess(
            request.jobs, request.machines, request.resources, state["schedule"]
        )
        return {"risk": risk}

    @traceable(name="Resource Analysis")
    def _analyze_resources(self, state: OptimizationState) -> OptimizationState:
        resources = self.resource_analyzer.analyze(
            state["request"], state["schedule"], state["performance"], state["now"]
        )
        return {"resources": resources}

    @traceable(name="Customer Impact")
    def _analyze_customer_impact(self, state: OptimizationState) -> OptimizationState:
        return {"customer_impact": self.customer_analyzer.analyze(state["schedule"])}

    @traceable(name="Constraint Validation")
    def _validate_schedule(self, state: OptimizationState) -> OptimizationState:
        is_valid, violations, report = self.constraint_agent.validate_schedule(
            state["schedule"], state["request"]
        )
        if not is_valid:
            logger.warning("Schedule audit found %d violation(s)", len(violations))
        return {"validation": ScheduleValidation(is_valid, violations, report)}

    @traceable(name="Baseline Comparison")
    def _run_baseline(self, state: OptimizationState) -> OptimizationState:
        request = state["request"]
        baseline = self.baseline.schedule(
            request.jobs, request.machines, request.goals, state["now"]
        )
        return {"baseline_elapsed": baseline.elapsed_hours()}

    @traceable(name="Alternative Scenarios")
    def _generate_scenarios(self, state: OptimizationState) -> OptimizationState:
        return {"scenarios": self.scenario_generator.generate(state["request"], state["now"])}

    @traceable(name="Insights and Alerts")
    def _generate_insights(self, state: OptimizationState) -> OptimizationState:
        ctx = InsightContext(
            request=state["request"],
            schedule=state["schedule"],
            performance=state["performance"],
            resources=state["resources"],
            costs=state["costs"],
            risk=state["risk"],
            validation=state["validation"],
            baseline_elapsed=state["baseline_elapsed"],
            policy=self.policy,
        )
        return {
            "insights": self.insight_engine.generate_insights(ctx),
            "alerts": self.insight_engine.generate_alerts(ctx),
            "recommendations": self.insight_engine.generate_recommendations(ctx),
        }

    @traceable(name="Result Assembly")
    def _assemble_result(self, state: OptimizationState) -> OptimizationState:
        result = OptimizationResult(
            schedule=state["schedule"],
            performance=state["performance"],
            resources=state["resources"],
            costs=state["costs"],
            risk=state["risk"],
            insights=state["insights"],
            scenarios=state["scenarios"],
            real_time_adjustments=self.policy.real_time_adjustments,
            customer_impact=state["customer_impact"],
            alerts=state["alerts"],
            validation=state["validation"],
            recommendations=state["recommendations"],
            generated_at=state["now"],
        )
        return {"result": result}

    @traceable(name="Supervisor Summary")
    def _explain_result(self, state: OptimizationState) -> OptimizationState:
        result = state["result"]
        result.explanation = self.supervisor.explain_result(result)
        return {"result": result}

    @traceable(name="Full Optimization")
    def optimize(
        self,
        request: OptimizationRequest,
        now: Optional[datetime] = None
    ) -> OptimizationResult:
        """
        Run the full optimization workflow.

        This is the main entry point for optimization.

        Args:
            request: Input bundle
            now: Reference time; read from the clock only when omitted. Mixed
                naive and timezone-aware values are aligned to UTC first

        Returns:
            OptimizationResult

        Raises:
            InputValidationError: if the request fails validation
        """
        validate_request(request)
        request, now = request.align_timezones(now)

        if now is None:
            now = datetime.now(request.jobs[0].due_date.tzinfo)

        start_time = time_module.time()
        logger.info("Starting optimization: %s", request)

        final_state = self.workflow.invoke({"request": request, "now": now})
        result = final_state["result"]

        logger.info(
            "Optimization complete in %.2fs: %s",
            time_module.time() - start_time, result,
        )
        return result


# Example usage and testing
if __name__ == "__main__":
    import os
    from dotenv import load_dotenv
    from utils.data_generator import create_sample_request
    from utils.config_loader import load_policy
    from utils.logging_conf import configure_logging

    load_dotenv()
    configure_logging()

    # Load configuration
    policy = load_policy()

    # Generate test request
    request = create_sample_request(12, seed=7)
    print(f"Generated {request}")

    supervisor = SupervisorAgent() if os.getenv("GROQ_API_KEY") else None
    orchestrator = OptimizationOrchestrator(policy, supervisor)

    result = orchestrator.optimize(request)

    print("\nKEY METRICS:")
    for name, value in result.key_metrics().items():
        print(f"  {name}: {value}")

    print("\nSCHEDULE:")
    for sj in result.schedule:
        print(f"  #{sj.sequence_number:>2} {sj.job_id} on {sj.assigned_machine}: "
              f"{sj.scheduled_start:%a %H:%M} - {sj.scheduled_end:%a %H:%M}"
              f"{'  LATE' if sj.is_late() else ''}")

    print("\nRECOMMENDATIONS:")
    for line in result.recommendations:
        print(f"  - {line}")

    if result.explanation:
        print(result.explanation)
