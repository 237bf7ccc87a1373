"""
Supervisor Agent - Executive Summary Writer

This agent turns a finished optimization result into a short narrative for
the shop manager. It never changes the schedule; every figure it quotes
comes from the deterministic engine.

Key Responsibilities:
    - Summarize the optimized schedule and its KPIs
    - Highlight risk, late jobs and unassignable jobs
    - Generate comprehensive explanation reports

Uses Groq's llama-3.3-70b-versatile for the narrative.
"""

import os
import logging
from typing import Any, Optional

from langchain_groq import ChatGroq
from langchain_core.messages import HumanMessage, SystemMessage

from models.analysis import OptimizationResult

logger = logging.getLogger(__name__)


class SupervisorAgent:
    """
    Supervisor Agent - optional LLM layer on top of the engine.

    Pass ``llm`` to use any chat model exposing ``invoke(messages)``;
    otherwise a ChatGroq client is created from the API key.
    """

    def __init__(self, groq_api_key: Optional[str] = None, llm: Optional[Any] = None):
        """
        Initialize the Supervisor Agent with Groq LLM.

        Args:
            groq_api_key: Groq API key (if not provided, reads from environment)
            llm: Pre-built chat model, used instead of ChatGroq when given

        Raises:
            ValueError: if neither a model nor an API key is available
        """
        if llm is None:
            if groq_api_key is None:
                groq_api_key = os.getenv('GROQ_API_KEY')

            if not groq_api_key:
                raise ValueError("Groq API key required. Set GROQ_API_KEY environment variable.")

            llm = ChatGroq(
                api_key=groq_api_key,
                model_name=os.getenv('GROQ_MODEL_SUPERVISOR', 'llama-3.3-70b-versatile'),
                temperature=0.2,
                max_tokens=1024
            )
        self.llm = llm

        self.system_prompt = """You are the Supervisor Agent of a laser-cutting job queue optimizer.

You receive the output of a deterministic scheduling engine: the sequenced
job queue, KPIs, risk level, cost figures and rule-based alerts.

Your role is to:
1. Summarize the schedule for a plant manager
2. Point out late, critical and unassignable jobs
3. Recommend the next actions from the alerts provided

Never invent numbers. Quote only the figures you are given.
Provide concise, executive-level explanations that non-technical plant managers can understand."""

    def build_prompt(self, result: OptimizationResult) -> str:
        """Render the result figures the model is allowed to quote."""
        perf = result.performance
        schedule_lines = [
            f"  #{sj.sequence_number} {sj.job_id} ({sj.job.priority}) on {sj.assigned_machine}: "
            f"{sj.scheduled_start:%a %H:%M} - {sj.scheduled_end:%a %H:%M}"
            f"{' LATE' if sj.is_late() else ''}"
            for sj in result.schedule
        ]
        unassigned = [f"  {u.job.job_id}: {u.reason}" for u in result.schedule.unassignable]
        scenarios = [
            f"  {s.scenario_name}: {s.makespan:.1f}h elapsed, {s.on_time_rate:.0f}% on time"
            for s in result.scenarios
        ]

        return f"""Summarize this optimized laser-cutting schedule:

SCHEDULE:
{chr(10).join(schedule_lines) if schedule_lines else '  No jobs scheduled'}

UNASSIGNABLE JOBS:
{chr(10).join(unassigned) if unassigned else '  None'}

KPIs:
- Machine time: {perf.total_makespan:.1f} hours ({perf.elapsed_makespan:.1f} hours elapsed)
- On-time delivery: {perf.on_time_delivery_rate:.1f}% ({perf.late_jobs} late)
- Total tardiness: {perf.total_tardiness:.1f} hours
- Schedule risk: {result.risk.schedule_risk}
- Estimated cost: ${result.costs.total_cost:,.0f}

ALTERNATIVES:
{chr(10).join(scenarios) if scenarios else '  None'}

ALERTS:
{chr(10).join('- ' + a for a in result.alerts.urgent_actions + result.alerts.capacity_warnings) or '- None'}

Write a brief executive summary (3-5 sentences) covering:
1. Whether the schedule meets its due dates
2. The main risk or bottleneck
3. The most important next action"""

    def explain_result(self, result: OptimizationResult) -> str:
        """
        Generate an executive summary for an optimization result.

        Args:
            result: Finished optimization result

        Returns:
            Explanation report text
        """
        messages = [
            SystemMessage(content=self.system_prompt),
            HumanMessage(content=self.build_prompt(result))
        ]

        logger.info("Requesting executive summary for %d scheduled jobs", len(result.schedule))
        response = self.llm.invoke(messages)

        return f"""
JOB QUEUE OPTIMIZATION - EXECUTIVE SUMMARY
{'=' * 60}

{response.content}

{'=' * 60}
Schedule risk: {result.risk.schedule_risk} | On-time: {result.performance.on_time_delivery_rate:.1f}%
"""

    def __str__(self) -> str:
        return "SupervisorAgent(model=llama-3.3-70b-versatile)"
