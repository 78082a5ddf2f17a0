"""Recompute pipeline: panels + controls in, every derived view out.

- recompute.py: `recompute(PipelineInputs) -> PipelineOutputs`, stateless
"""
