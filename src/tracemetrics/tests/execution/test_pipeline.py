from __future__ import annotations

import pytest

from tracemetrics.core.errors import HandlerDependencyError
from tracemetrics.core.handler import HandlerState
from tracemetrics.core.types import PipelineConfig
from tracemetrics.execution.pipeline import PipelineResult, TracePipeline
from tracemetrics.handlers.meta import MetaData


class TestTracePipeline:
    def test_default_pipeline_runs_dependencies_first(self) -> None:
        pipeline = TracePipeline()

        assert pipeline.order == ("Meta", "Renderer", "PageLoadMetrics")

    def test_requested_handler_pulls_only_its_dependencies(self) -> None:
        pipeline = TracePipeline(PipelineConfig(handlers=("Renderer",)))

        assert pipeline.order == ("Meta", "Renderer")
        with pytest.raises(KeyError, match="PageLoadMetrics"):
            pipeline.handler("PageLoadMetrics")

    def test_unknown_handler_is_rejected(self) -> None:
        with pytest.raises(HandlerDependencyError, match="Nope"):
            TracePipeline(PipelineConfig(handlers=("Nope",)))

    def test_result_holds_every_handler(self, trace) -> None:
        trace.navigation("NAV-1", 100_000)

        result = trace.run()

        assert isinstance(result, PipelineResult)
        assert result.order == ("Meta", "Renderer", "PageLoadMetrics")
        assert set(result.data) == {"Meta", "Renderer", "PageLoadMetrics"}
        assert isinstance(result["Meta"], MetaData)
        assert result.event_count == len(trace.events)

    def test_result_data_is_read_only(self, trace) -> None:
        result = trace.run()

        with pytest.raises(TypeError):
            result.data["Meta"] = None

    def test_handlers_are_finalized_after_run(self, trace) -> None:
        pipeline = TracePipeline()

        pipeline.run(trace.events)

        for name in pipeline.order:
            assert pipeline.handler(name).state is HandlerState.FINALIZED

    def test_run_accepts_a_generator(self, trace) -> None:
        trace.navigation("NAV-1", 100_000)

        result = TracePipeline().run(event for event in trace.events)

        assert "NAV-1" in result["Meta"].navigations_by_navigation_id
        assert result.event_count == len(trace.events)

    def test_pipeline_is_reusable(self, trace) -> None:
        trace.navigation("NAV-1", 100_000)
        trace.fcp(400_000, "NAV-1")
        pipeline = TracePipeline()

        first = pipeline.run(trace.events)
        second = pipeline.run(trace.events)

        assert first["PageLoadMetrics"].metric_scores_by_frame_id == second["PageLoadMetrics"].metric_scores_by_frame_id
