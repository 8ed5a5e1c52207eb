"""GraphQL documents sent to the Linear API."""

from __future__ import annotations

_RISK_ISSUE_FIELDS = """
          identifier
          title
          url
          dueDate
          updatedAt
          state { type }
          assignee { displayName name }
"""

TEAMS_LIST_QUERY = """
  query { teams { nodes { id name key } } }
"""

TEAM_MEMBERS_QUERY = """
  query TeamMembers($teamId: String!) {
    team(id: $teamId) {
      id
      name
      members {
        nodes {
          id
          displayName
          name
          email
          avatarUrl
          active
          assignedIssues(
            filter: { state: { type: { nin: ["completed", "canceled"] } } }
            first: 50
          ) {
            nodes {
              id
              identifier
              title
              url
              dueDate
              updatedAt
              state { type }
            }
          }
        }
      }
    }
  }
"""

TEAM_RISKS_QUERY = (
    """
  query TeamRisks($teamId: String!) {
    team(id: $teamId) {
      name
      issues(
        filter: { state: { type: { nin: ["completed", "canceled"] } } }
        first: 100
      ) {
        nodes {"""
    + _RISK_ISSUE_FIELDS
    + """        }
      }
    }
  }
"""
)

USER_ISSUES_QUERY = """
  query UserIssues($userId: String!) {
    user(id: $userId) {
      assignedIssues(orderBy: updatedAt, first: 20) {
        nodes {
          identifier
          title
          url
          priorityLabel
          updatedAt
          state { name color type }
        }
      }
    }
  }
"""

_CYCLE_FIELDS = (
    """
      id
      name
      number
      startsAt
      endsAt
      issues(first: 100) {
        nodes {"""
    + _RISK_ISSUE_FIELDS
    + """        }
      }
"""
)

CYCLE_QUERY = (
    """
  query Cycle($cycleId: String!) {
    cycle(id: $cycleId) {"""
    + _CYCLE_FIELDS
    + """    }
  }
"""
)

ACTIVE_CYCLE_QUERY = (
    """
  query ActiveCycle($teamId: String!) {
    team(id: $teamId) {
      activeCycle {"""
    + _CYCLE_FIELDS
    + """      }
    }
  }
"""
)

SEARCH_ISSUES_QUERY = """
  query SearchIssues($term: String!, $first: Int) {
    searchIssues(term: $term, first: $first) {
      nodes {
        identifier
        title
        url
        priorityLabel
        labelIds
        createdAt
        updatedAt
        state { name type }
        assignee { name }
      }
    }
  }
"""
