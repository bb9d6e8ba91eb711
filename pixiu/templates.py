"""Job configuration documents for the CI server."""

from __future__ import annotations

from dataclasses import dataclass
from string import Template
from typing import Union

JENKINS = "jenkins"
PIPELINE_STYLE = "PipLineStyle"

# A node is (tag, attributes, content); content None means a self-closing
# element, a string means a text element, a list means nested elements.
_Node = tuple
_Content = Union[None, str, list]


def _e(tag: str, content: _Content = None, attrs: dict | None = None) -> _Node:
    return (tag, attrs or {}, content)


def _render(node: _Node, depth: int = 0) -> list[str]:
    tag, attrs, content = node
    pad = "  " * depth
    head = tag + "".join(f' {key}="{value}"' for key, value in attrs.items())
    if content is None:
        return [f"{pad}<{head}/>"]
    if isinstance(content, str):
        return [f"{pad}<{head}>{content}</{tag}>"]
    lines = [f"{pad}<{head}>"]
    for child in content:
        lines.extend(_render(child, depth + 1))
    lines.append(f"{pad}</{tag}>")
    return lines


def _document(version: str, root: _Node, trailing_newline: bool = False) -> str:
    text = "\n".join([f"<?xml version='{version}' encoding='UTF-8'?>", *_render(root)])
    return text + "\n" if trailing_newline else text


def _git_scm() -> _Node:
    return _e(
        "scm",
        [
            _e("configVersion", "2"),
            _e(
                "userRemoteConfigs",
                [
                    _e(
                        "hudson.plugins.git.UserRemoteConfig",
                        [_e("url", "${git_url}"), _e("credentialsId", "${credentials_id}")],
                    )
                ],
            ),
            _e(
                "branches",
                [_e("hudson.plugins.git.BranchSpec", [_e("name", "*/${branch}")])],
            ),
            _e("doGenerateSubmoduleConfigurations", "false"),
            _e("submoduleCfg", attrs={"class": "empty-list"}),
            _e("extensions"),
        ],
        {"class": "hudson.plugins.git.GitSCM", "plugin": "git@4.11.5"},
    )


def _build_block() -> list[_Node]:
    return [
        _e("canRoam", "true"),
        _e("disabled", "false"),
        _e("blockBuildWhenDownstreamBuilding", "false"),
        _e("blockBuildWhenUpstreamBuilding", "false"),
    ]


def _project_head() -> list[_Node]:
    return [
        _e("actions"),
        _e("description", ""),
        _e("keepDependencies", "false"),
        _e("properties"),
    ]


JOB_STRING_CONFIG = _document(
    "1.0",
    _e(
        "project",
        [
            *_project_head(),
            _e("scm", attrs={"class": "hudson.scm.NullSCM"}),
            *_build_block(),
            _e("triggers", attrs={"class": "vector"}),
            _e("concurrentBuild", "false"),
            _e("builders"),
            _e("publishers"),
            _e("buildWrappers"),
        ],
    ),
)

FREE_STYLE_CONFIG = Template(
    _document(
        "1.1",
        _e(
            "project",
            [
                *_project_head(),
                _git_scm(),
                *_build_block(),
                _e("triggers"),
                _e("concurrentBuild", "false"),
                _e(
                    "builders",
                    [
                        _e(
                            "hudson.tasks.Shell",
                            [_e("command", "${script_path}"), _e("configuredLocalRules")],
                        )
                    ],
                ),
                _e("publishers"),
                _e("buildWrappers"),
            ],
        ),
    )
)

PIPELINE_STYLE_CONFIG = Template(
    _document(
        "1.1",
        _e(
            "flow-definition",
            [
                _e("description", ""),
                _e("keepDependencies", "false"),
                _e("properties"),
                _e(
                    "definition",
                    [
                        _git_scm(),
                        _e("scriptPath", "${script_path}"),
                        _e("lightweight", "true"),
                    ],
                    {
                        "class": "org.jenkinsci.plugins.workflow.cps.CpsScmFlowDefinition",
                        "plugin": "workflow-cps@2759.v87459c4eea_ca_",
                    },
                ),
                _e("triggers"),
                _e("disabled", "false"),
            ],
            {"plugin": "workflow-job"},
        ),
        trailing_newline=True,
    )
)

_ESCAPES = str.maketrans(
    {
        "\0": "\ufffd",
        '"': "&#34;",
        "&": "&amp;",
        "'": "&#39;",
        "+": "&#43;",
        "<": "&lt;",
        ">": "&gt;",
    }
)


@dataclass
class GitSource:
    """Where a job fetches its code and which script it runs."""

    git_url: str = ""
    credentials_id: str = ""
    branch: str = ""
    script_path: str = ""


def _escape(value: str) -> str:
    return value.translate(_ESCAPES)


def render_job_config(style: str, git: GitSource) -> str:
    """Render the job XML for ``style``; any style but pipeline is free-style."""
    template = PIPELINE_STYLE_CONFIG if style == PIPELINE_STYLE else FREE_STYLE_CONFIG
    rendered = template.substitute(
        git_url=_escape(git.git_url),
        credentials_id=_escape(git.credentials_id),
        branch=_escape(git.branch),
        script_path=_escape(git.script_path),
    )
    # "<" is allowed through so scripts may carry shell redirections.
    return rendered.replace("&lt;", "<")