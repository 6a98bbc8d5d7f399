# tests/core/test_runtime_config.py

"""
run this test with:
python -m pytest tests/core/test_runtime_config.py -v
"""

import pytest

from core.interceptors import InterceptorChain, ignore
from core.runtime_config import RuntimeConfig


class TestRuntimeVariables:

    def test_get_unknown_raises_key_error(self):
        with pytest.raises(KeyError):
            RuntimeConfig().get('missing')

    def test_get_with_default(self):
        assert RuntimeConfig().get('missing', 42) == 42

    def test_set_records_history(self):
        runtime = RuntimeConfig({'x': 1})
        record = runtime.set('x', 2, owner='test')

        assert runtime.get('x') == 2
        assert record.previous == 1
        assert record.value == 2
        assert record.owner == 'test'
        assert runtime.history == [record]

    def test_undo_restores_previous_value(self):
        runtime = RuntimeConfig({'x': 1})
        record = runtime.set('x', 2)
        runtime.undo(record)
        assert runtime.get('x') == 1

    def test_undo_of_new_variable_removes_it(self):
        runtime = RuntimeConfig()
        record = runtime.set('fresh', True)
        assert record.existed is False
        runtime.undo(record)
        assert 'fresh' not in runtime

    def test_iteration_and_as_dict(self):
        runtime = RuntimeConfig({'a': 1, 'b': 2})
        assert sorted(runtime) == ['a', 'b']
        assert runtime.as_dict() == {'a': 1, 'b': 2}


class TestRuntimeFunctions:

    def test_call_defined_function(self):
        runtime = RuntimeConfig(functions={'add': lambda a, b: a + b})
        assert runtime.call('add', 2, 3) == 5

    def test_unknown_function_raises_key_error(self):
        with pytest.raises(KeyError):
            RuntimeConfig().call('missing')

    def test_redefine_keeps_interceptors(self):
        runtime = RuntimeConfig(functions={'f': lambda: 'old'})
        runtime.intercept('f', lambda next_fn: next_fn().upper())
        runtime.define('f', lambda: 'new')
        assert runtime.call('f') == 'NEW'


class TestInterceptorChain:
    """Around-advice replacement: install, order, uninstall."""

    def test_no_interceptors_calls_target(self):
        chain = InterceptorChain('f', lambda x: x * 2)
        assert chain(4) == 8

    def test_lower_depth_runs_outermost(self):
        calls = []
        chain = InterceptorChain('f', lambda: calls.append('target'))

        def make(tag):
            def around(next_fn):
                calls.append(f'{tag}:before')
                next_fn()
                calls.append(f'{tag}:after')
            return around

        chain.install(make('inner'), depth=10)
        chain.install(make('outer'), depth=-10)
        chain()

        assert calls == ['outer:before', 'inner:before', 'target', 'inner:after', 'outer:after']

    def test_interceptor_can_rewrite_arguments(self):
        chain = InterceptorChain('f', lambda x: x)
        chain.install(lambda next_fn, x: next_fn(x + 1))
        assert chain(1) == 2

    def test_install_override_never_calls_target(self):
        calls = []
        chain = InterceptorChain('f', lambda: calls.append('target'))
        chain.install_override(ignore)
        assert chain() is None
        assert calls == []

    def test_uninstall_runs_restoration_closure_once(self):
        restored = []
        chain = InterceptorChain('f', lambda: 'target')
        interceptor = chain.install_override(lambda: 'override', on_uninstall=lambda: restored.append(True))

        assert chain() == 'override'
        assert interceptor.uninstall() is True
        assert interceptor.uninstall() is False
        assert restored == [True]
        assert not interceptor.installed
        assert chain() == 'target'

    def test_self_uninstall_during_call_is_safe(self):
        chain = InterceptorChain('f', lambda: 'target')
        holder = {}

        def around(next_fn):
            try:
                return next_fn()
            finally:
                holder['interceptor'].uninstall()

        holder['interceptor'] = chain.install(around)
        assert chain() == 'target'
        assert len(chain) == 0
