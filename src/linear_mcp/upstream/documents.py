"""GraphQL documents for the Linear API.

Kept together so they are easy to audit against the upstream schema.

Linear priority values: 0=No priority, 1=Urgent, 2=High, 3=Medium, 4=Low.
"""

from typing import Sequence

# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------

CREATE_ISSUE_MUTATION = """
mutation CreateIssue($input: IssueCreateInput!) {
  issueCreate(input: $input) {
    success
    issue {
      id
      identifier
      title
      url
      priority
      estimate
      team { id name }
      project { id name }
      assignee { id name }
    }
  }
}
"""

CREATE_BATCH_ISSUES_MUTATION = """
mutation CreateBatchIssues($input: IssueBatchCreateInput!) {
  issueBatchCreate(input: $input) {
    success
    issues {
      id
      identifier
      title
      url
      team { id name }
      project { id name }
    }
    lastSyncId
  }
}
"""

UPDATE_ISSUES_MUTATION = """
mutation UpdateIssues($ids: [UUID!]!, $input: IssueUpdateInput!) {
  issueBatchUpdate(ids: $ids, input: $input) {
    success
    issues {
      id
      identifier
      title
      url
      state { name }
    }
  }
}
"""

SEARCH_ISSUES_QUERY = """
query SearchIssues($filter: IssueFilter, $first: Int, $after: String, $orderBy: PaginationOrderBy) {
  issues(filter: $filter, first: $first, after: $after, orderBy: $orderBy) {
    pageInfo { hasNextPage endCursor }
    nodes {
      id
      identifier
      title
      description
      url
      priority
      estimate
      createdAt
      updatedAt
      state { id name type color }
      assignee { id name email }
      team { id name key }
      project { id name }
      labels { nodes { id name color } }
    }
  }
}
"""

DELETE_ISSUE_MUTATION = """
mutation DeleteIssue($id: String!) {
  issueDelete(id: $id) {
    success
  }
}
"""


def build_delete_issues_mutation(count: int) -> str:
    """Build one mutation document deleting ``count`` issues via aliases.

    Variables are ``$id0 .. $id{count-1}``; each result is aliased
    ``delete0 .. delete{count-1}``.
    """
    params = ", ".join(f"$id{i}: String!" for i in range(count))
    fields = "\n".join(
        f"  delete{i}: issueDelete(id: $id{i}) {{ success }}" for i in range(count)
    )
    return f"mutation DeleteIssues({params}) {{\n{fields}\n}}\n"


def delete_issues_variables(ids: Sequence[str]) -> dict:
    return {f"id{i}": issue_id for i, issue_id in enumerate(ids)}


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

CREATE_PROJECT_MUTATION = """
mutation CreateProject($input: ProjectCreateInput!) {
  projectCreate(input: $input) {
    success
    project {
      id
      name
      url
    }
    lastSyncId
  }
}
"""

GET_PROJECT_QUERY = """
query GetProject($id: String!) {
  project(id: $id) {
    id
    name
    description
    url
    teams { nodes { id name } }
  }
}
"""

SEARCH_PROJECTS_QUERY = """
query SearchProjects($filter: ProjectFilter) {
  projects(filter: $filter) {
    nodes {
      id
      name
      description
      url
      teams { nodes { id name } }
    }
  }
}
"""

UPDATE_PROJECT_INITIATIVE_MUTATION = """
mutation UpdateProjectInitiative($id: String!, $input: ProjectUpdateInput!) {
  projectUpdate(id: $id, input: $input) {
    success
    project {
      id
      initiative { id name }
    }
  }
}
"""

# ---------------------------------------------------------------------------
# Teams and users
# ---------------------------------------------------------------------------

GET_TEAMS_QUERY = """
query GetTeams {
  teams {
    nodes {
      id
      name
      key
      description
      states { nodes { id name type color } }
      labels { nodes { id name color } }
    }
  }
}
"""

GET_USER_QUERY = """
query GetUser {
  viewer {
    id
    name
    email
    teams { nodes { id name key } }
  }
}
"""

# ---------------------------------------------------------------------------
# Initiatives
# ---------------------------------------------------------------------------

_INITIATIVE_FIELDS = """
      id
      name
      description
      content
      url
      slugId
      color
      icon
      sortOrder
      targetDate
      startedAt
      completedAt
      archivedAt
      createdAt
      updatedAt
      trashed
      creator { id name }
      owner { id name }
      organization { id name }
      projects { nodes { id name } }
"""

CREATE_INITIATIVE_MUTATION = """
mutation CreateInitiative($input: InitiativeCreateInput!) {
  initiativeCreate(input: $input) {
    success
    initiative {
      id
      name
      description
      content
      url
      slugId
      color
      icon
      targetDate
      startedAt
      createdAt
      owner { id name }
    }
  }
}
"""

UPDATE_INITIATIVE_MUTATION = """
mutation UpdateInitiative($id: String!, $input: InitiativeUpdateInput!) {
  initiativeUpdate(id: $id, input: $input) {
    success
    initiative {
      id
      name
      description
      content
      url
      slugId
      color
      icon
      targetDate
      startedAt
      completedAt
      updatedAt
      owner { id name }
    }
  }
}
"""

LIST_INITIATIVES_QUERY = (
    """
query ListInitiatives(
  $first: Int
  $after: String
  $includeArchived: Boolean
  $orderBy: PaginationOrderBy
  $filter: InitiativeFilter
) {
  initiatives(
    first: $first
    after: $after
    includeArchived: $includeArchived
    orderBy: $orderBy
    filter: $filter
  ) {
    pageInfo { hasNextPage endCursor }
    nodes {"""
    + _INITIATIVE_FIELDS
    + """    }
  }
}
"""
)

GET_INITIATIVE_QUERY = (
    """
query GetInitiative($id: String!) {
  initiative(id: $id) {"""
    + _INITIATIVE_FIELDS
    + """      updateReminderFrequency
      updateReminderFrequencyInWeeks
      updateRemindersDay
      updateRemindersHour
  }
}
"""
)

DELETE_INITIATIVE_MUTATION = """
mutation DeleteInitiative($id: String!) {
  initiativeDelete(id: $id) {
    success
  }
}
"""
