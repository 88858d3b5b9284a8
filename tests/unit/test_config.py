"""
Unit tests for variable configuration.
"""
import pytest
import yaml
from unittest.mock import patch

from commonmk import config
from commonmk.config import Variables, load_project_file, parse_assignments
from commonmk.errors import ConfigError, UsageError


class TestParseAssignments:
    """Test splitting command-line words into targets and assignments."""

    def test_separates_targets_and_assignments(self):
        targets, assignments = parse_assignments(['pg-select', 'TABLE=users', 'LIMIT=5'])
        assert targets == ['pg-select']
        assert assignments == {'TABLE': 'users', 'LIMIT': '5'}

    def test_value_may_contain_equals(self):
        _, assignments = parse_assignments(['GO_BUILD_FLAGS=-ldflags=-s'])
        assert assignments == {'GO_BUILD_FLAGS': '-ldflags=-s'}

    def test_empty_value_is_assignment(self):
        _, assignments = parse_assignments(['DOCKER_REGISTRY='])
        assert assignments == {'DOCKER_REGISTRY': ''}

    def test_invalid_name_is_target(self):
        targets, assignments = parse_assignments(['1X=2', 'docker-build'])
        assert targets == ['1X=2', 'docker-build']
        assert assignments == {}


class TestVariables:
    """Test variable layering and expansion."""

    def test_defaults(self):
        v = Variables(environ={})
        assert v.get('PROJECT_NAME') == 'chitchat'
        assert v.get('DOCKER_TAG') == 'latest'
        assert v.get('DOCKER_REGISTRY') == ''

    def test_precedence(self):
        v = Variables(
            project={'VERSION': '2.0.0', 'DOCKER_TAG': 'project'},
            overrides={'DOCKER_TAG': 'cli'},
            environ={'VERSION': '3.0.0', 'DOCKER_TAG': 'env'},
        )
        assert v.get('VERSION') == '3.0.0'
        assert v.get('DOCKER_TAG') == 'cli'

    def test_project_overrides_default(self):
        v = Variables(project={'PROJECT_NAME': 'orders'}, environ={})
        assert v.get('PROJECT_NAME') == 'orders'

    def test_references_expand_recursively(self):
        v = Variables(project={'PROJECT_NAME': 'orders'}, environ={})
        assert v.get('BINARY') == 'bin/orders'
        assert v.get('DOCKER_IMAGE_NAME') == 'orders'

    def test_reference_to_override(self):
        v = Variables(overrides={'BIN_DIR': 'out'}, environ={})
        assert v.get('BINARY') == 'out/chitchat'

    def test_unknown_reference_is_empty(self):
        v = Variables(project={'X': 'a$(NOPE)b'}, environ={})
        assert v.get('X') == 'ab'

    def test_double_dollar_is_literal(self):
        v = Variables(project={'X': 'cost: $$5'}, environ={})
        assert v.get('X') == 'cost: $5'

    def test_cycle_raises(self):
        v = Variables(project={'A': '$(B)', 'B': '$(A)'}, environ={})
        with pytest.raises(ConfigError, match='Recursive'):
            v.get('A')

    def test_missing_name_returns_default(self):
        v = Variables(environ={})
        assert v.get('TABLE') == ''
        assert v.get('TABLE', 'users') == 'users'

    def test_environment_supplies_unknown_names(self):
        v = Variables(environ={'TABLE': 'users'})
        assert v.get('TABLE') == 'users'

    def test_split_uses_shell_quoting(self):
        v = Variables(overrides={'GIT_COMMIT': 'abc', 'BUILD_TIME': 'now'}, environ={})
        assert v.split('GO_BUILD_FLAGS') == [
            '-ldflags',
            '-X main.version=1.0.0 -X main.commit=abc -X main.date=now',
        ]
        assert v.split('DOCKER_COMPOSE') == ['docker-compose', '-f', 'hack/docker-compose.yaml']

    def test_split_unbalanced_quote_raises(self):
        v = Variables(overrides={'GO': 'go "oops'}, environ={})
        with pytest.raises(ConfigError):
            v.split('GO')

    def test_require(self):
        v = Variables(overrides={'TABLE': 'users'}, environ={})
        assert v.require('TABLE', 'usage') == 'users'

    def test_require_blank_raises_usage(self):
        v = Variables(overrides={'TABLE': '  '}, environ={})
        with pytest.raises(UsageError, match='Usage: x'):
            v.require('TABLE', 'Usage: x')

    def test_probe_runs_once(self):
        calls = []

        def probe(cwd):
            calls.append(cwd)
            return 'deadbee'

        with patch.dict(config.PROBES, {'GIT_COMMIT': probe}):
            v = Variables(environ={})
            assert v.get('GIT_COMMIT') == 'deadbee'
            assert v.get('GIT_COMMIT') == 'deadbee'

        assert len(calls) == 1

    def test_probe_failure_is_empty(self):
        with patch('commonmk.config.subprocess.run', side_effect=FileNotFoundError('git')):
            v = Variables(environ={})
            assert v.get('GIT_BRANCH') == ''

    def test_go_version_probe(self):
        with patch('commonmk.config._command_output', return_value='go version go1.24.1 linux/amd64'):
            v = Variables(environ={})
            assert v.get('GO_VERSION') == 'go1.24.1'

    def test_build_time_format(self):
        v = Variables(environ={})
        value = v.get('BUILD_TIME')
        assert len(value) == len('2024-01-01_00:00:00')
        assert value[10] == '_'


class TestLoadProjectFile:
    """Test loading commonmk.yaml."""

    def test_missing_file_is_empty_project(self, tmp_path):
        project = load_project_file(tmp_path / 'commonmk.yaml')
        assert project == {'variables': {}, 'targets': {}, 'gate_on_init': False}

    def test_loads_variables_as_strings(self, tmp_path):
        path = tmp_path / 'commonmk.yaml'
        with open(path, 'w') as f:
            yaml.dump({'variables': {'APP_PORT': 9090, 'DOCKER_REGISTRY': None}, 'gate_on_init': True}, f)

        project = load_project_file(path)

        assert project['variables'] == {'APP_PORT': '9090', 'DOCKER_REGISTRY': ''}
        assert project['gate_on_init'] is True

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'commonmk.yaml'
        path.write_text('variables: [unclosed\n')
        with pytest.raises(ConfigError, match='Invalid YAML'):
            load_project_file(path)

    def test_variables_must_be_mapping(self, tmp_path):
        path = tmp_path / 'commonmk.yaml'
        path.write_text('variables:\n  - A\n')
        with pytest.raises(ConfigError, match="'variables'"):
            load_project_file(path)

    def test_invalid_variable_name(self, tmp_path):
        path = tmp_path / 'commonmk.yaml'
        path.write_text('variables:\n  bad-name: 1\n')
        with pytest.raises(ConfigError, match='Invalid variable name'):
            load_project_file(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / 'commonmk.yaml'
        path.write_text('- a\n- b\n')
        with pytest.raises(ConfigError, match='mapping'):
            load_project_file(path)
