"""统一异常体系

所有业务异常继承 GitDepsError，替代散落的 ValueError / RuntimeError。
Web 层可据此自动映射 HTTP 状态码，CLI 层可据此输出友好提示。
"""

from __future__ import annotations


class GitDepsError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(GitDepsError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(GitDepsError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class InvalidRepositoryPathError(ValidationError):
    """仓库路径无法规范化为 owner/name"""

    code = "INVALID_REPOSITORY_PATH"


class VersionParseError(ValidationError):
    """语义版本或版本范围格式错误"""

    code = "VERSION_PARSE_ERROR"


class NoSatisfyingVersionError(GitDepsError):
    """没有任何标签满足请求的版本范围"""

    code = "NO_SATISFYING_VERSION"

    def __init__(self, repo: str, version_range: str) -> None:
        super().__init__(f"{repo} 没有满足 '{version_range}' 的版本")
        self.repo = repo
        self.version_range = version_range


class ManifestMissingError(GitDepsError):
    """包目录中缺少元数据文件"""

    code = "MANIFEST_MISSING"


class ManifestUnparsableError(GitDepsError):
    """元数据文件无法解析"""

    code = "MANIFEST_UNPARSABLE"


class RepositoryMismatchError(GitDepsError):
    """元数据声明的仓库与请求的仓库不一致"""

    code = "REPOSITORY_MISMATCH"

    def __init__(self, expected: str, declared: str) -> None:
        super().__init__(
            f"元数据声明的仓库 '{declared}' 与请求的仓库 '{expected}' 不一致"
        )
        self.expected = expected
        self.declared = declared


class ExternalProcessError(GitDepsError):
    """外部进程（git）返回非零退出码"""

    code = "EXTERNAL_PROCESS_ERROR"

    def __init__(self, message: str, stderr: str = "", returncode: int = -1) -> None:
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


class CorruptInstallationError(GitDepsError):
    """包目录存在但无法确定已安装版本"""

    code = "CORRUPT_INSTALLATION"


class DependencyLoopError(GitDepsError):
    """依赖校验在允许的轮数内未收敛"""

    code = "DEPENDENCY_LOOP"


class RemoteMetadataError(GitDepsError):
    """远程元数据获取失败"""

    code = "REMOTE_METADATA_ERROR"
