"""Repository selectors resolving the URIs of a run."""

from .bitbucket_cloud import BitbucketWorkspacePrefixSelector
from .github import GitHubOrgPrefixSelector
from .static import FileRepositorySelector, StaticRepositorySelector, StreamRepositorySelector

__all__ = [
	"BitbucketWorkspacePrefixSelector",
	"FileRepositorySelector",
	"GitHubOrgPrefixSelector",
	"StaticRepositorySelector",
	"StreamRepositorySelector",
]
