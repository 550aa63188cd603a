"""Tests for project models."""

import pytest

from lookml_transfer.api.exceptions import ParseError
from lookml_transfer.models.project import (
    ConnectionTestStatus,
    GitBranchRequest,
    LookerProject,
    LookMLModel,
    ProjectDescriptor,
    RemoteRepository,
)


class TestRemoteRepository:
    """Test GitHub remote URL parsing."""

    @pytest.mark.parametrize(
        'url',
        [
            'git@github.com:acme/reporting.git',
            'git@github.com:acme/reporting',
            'https://github.com/acme/reporting',
            'https://github.com/acme/reporting.git',
        ],
    )
    def test_parse_valid_remote(self, url):
        repository = RemoteRepository.parse(url, 'github')

        assert repository.owner == 'acme'
        assert repository.repo == 'reporting'
        assert repository.remote_url == url
        assert repository.service_name == 'github'

    def test_parse_dashed_repo(self):
        repository = RemoteRepository.parse('git@github.com:acme/sales-reporting.git')

        assert repository.owner == 'acme'
        assert repository.repo == 'sales-reporting'

    @pytest.mark.parametrize(
        'url',
        [
            'git@gitlab.com:acme/reporting.git',
            'https://bitbucket.org/acme/reporting',
            'git@github.com:acme',
            'https://github.com/acme/',
            '',
            None,
        ],
    )
    def test_parse_invalid_remote(self, url):
        with pytest.raises(ParseError):
            RemoteRepository.parse(url)

    def test_project_remote_repository(self):
        project = LookerProject(
            id='sales_reporting',
            git_remote_url='git@github.com:acme/sales-reporting.git',
            git_service_name='github',
            unknown_field=True,
        )

        repository = project.remote_repository()

        assert (repository.owner, repository.repo) == ('acme', 'sales-reporting')
        assert repository.service_name == 'github'


class TestProjectDescriptor:
    def test_strips_values(self):
        descriptor = ProjectDescriptor(project_id=' sales ', base_branch=' main ')

        assert descriptor.project_id == 'sales'
        assert descriptor.base_branch == 'main'

    def test_empty_project_id_rejected(self):
        with pytest.raises(ValueError):
            ProjectDescriptor(project_id='  ', base_branch='main')

    def test_blank_base_branch_defaults(self):
        assert ProjectDescriptor(project_id='sales', base_branch='').base_branch == (
            'master'
        )


class TestConnectionTestStatus:
    @pytest.mark.parametrize('status', ['pass', 'passed', 'Pass', ' pass '])
    def test_pass_prefix(self, status):
        assert ConnectionTestStatus.from_api(status) == ConnectionTestStatus.PASS

    @pytest.mark.parametrize('status', ['fail', 'error', 'bypass', '', None])
    def test_everything_else_fails(self, status):
        assert ConnectionTestStatus.from_api(status) == ConnectionTestStatus.FAIL


class TestLookMLModel:
    def test_target_payload_allows_all_connections(self):
        model = LookMLModel(
            name='sales',
            project_name='sales_reporting',
            allow_all_db_connections=False,
            has_content=True,
        )

        assert model.target_payload() == {
            'name': 'sales',
            'project_name': 'sales_reporting',
            'allow_all_db_connections': True,
        }


def test_branch_request_from_base():
    branch = GitBranchRequest.from_base('lookml_transfer_sales', 'main')

    assert branch.dict() == {'name': 'lookml_transfer_sales', 'ref': 'origin/main'}
