"""
Pipeline 框架測試
"""

import pandas as pd
import pytest

from meter_billing.core.pipeline import (
    Pipeline,
    PipelineBuilder,
    PipelineConfig,
    PipelineStep,
    ProcessingContext,
    StepResult,
    StepStatus,
)


class RecordStep(PipelineStep):
    def __init__(self, name, value=None, **kwargs):
        super().__init__(name=name, **kwargs)
        self.value = value

    def execute(self, context):
        context.set_variable(self.name, self.value)
        return StepResult.succeeded(self.name, value=self.value)


class BoomStep(PipelineStep):
    def execute(self, context):
        raise KeyError('boom')


class NeedsVariableStep(RecordStep):
    def validate_input(self, context):
        return context.has_variable('missing')


def test_sequential_execution():
    pipeline = PipelineBuilder('demo').add_steps(RecordStep('a', 1), RecordStep('b', 2)).build()
    context = ProcessingContext(task_name='demo')
    run = pipeline.execute(context)

    assert run.success
    assert run.first_failure is None
    assert run.count(StepStatus.SUCCESS) == 2
    assert run.duration >= 0
    assert context.get_variable('a') == 1
    assert [record.step for record in context.get_history()] == ['a', 'b']
    assert context.get_last_step().status == 'success'


def test_exception_becomes_failed_result_and_stops():
    pipeline = Pipeline(PipelineConfig(name='demo'))
    pipeline.add_steps([RecordStep('a', 1), BoomStep('boom'), RecordStep('c', 3)])
    context = ProcessingContext()
    run = pipeline.execute(context)

    assert not run.success
    assert len(run.step_results) == 2
    failed = run.first_failure
    assert failed.step_name == 'boom'
    assert isinstance(failed.error, KeyError)
    assert not context.has_variable('c')

    summary = run.to_dict()
    assert summary['total_steps'] == 3
    assert summary['executed_steps'] == 2
    assert summary['failed_steps'] == 1


def test_continue_on_error():
    pipeline = (PipelineBuilder('demo')
                .with_stop_on_error(False)
                .add_steps(BoomStep('boom'), RecordStep('c', 3))
                .build())
    run = pipeline.execute(ProcessingContext())
    assert len(run.step_results) == 2
    assert run.count(StepStatus.FAILED) == 1
    assert not run.success


def test_get_step_by_name():
    pipeline = PipelineBuilder('demo').add_step(RecordStep('a')).build()
    assert pipeline.get_step('a').name == 'a'
    assert pipeline.get_step('zzz') is None
    assert pipeline.step_names == ['a']


def test_validation_failure():
    required = NeedsVariableStep('req')
    optional = NeedsVariableStep('opt', required=False)
    context = ProcessingContext()

    failed = required(context)
    assert failed.status == StepStatus.FAILED
    assert isinstance(failed.error, ValueError)
    assert optional(context).status == StepStatus.SKIPPED


def test_post_action_runs_only_on_success():
    calls = []
    step = RecordStep('a', 1).add_post_action(lambda ctx: calls.append(ctx.get_variable('a')))
    step(ProcessingContext())
    assert calls == [1]

    boom = BoomStep('boom').add_post_action(lambda ctx: calls.append('boom'))
    boom(ProcessingContext())
    assert calls == [1]


def test_context_require():
    context = ProcessingContext()
    context.set_variable('batch', 'x')
    assert context.require('batch') == 'x'
    with pytest.raises(KeyError, match='column_map'):
        context.require('column_map')


def test_context_data_and_messages():
    context = ProcessingContext(data=pd.DataFrame({'x': [1, 2]}), task_name='demo')
    context.update_data(pd.DataFrame({'x': [1]}))
    context.add_warning('warn')
    context.add_error('err')

    assert len(context.data) == 1
    assert context.has_warnings() and context.has_errors()
    summary = context.to_dict()
    assert summary['warnings'] == 1
    assert summary['data_shape'] == (1, 1)


def test_step_result_to_dict():
    result = StepResult.failed('x', ValueError('bad'))
    payload = result.to_dict()
    assert payload['error'] == 'ValueError: bad'
    assert payload['status'] == 'failed'
    assert payload['message'] == 'bad'
