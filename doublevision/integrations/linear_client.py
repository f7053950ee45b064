import requests
from typing import Dict, Optional
from config.config import Config
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)

ISSUE_CREATE_MUTATION = """
mutation IssueCreate($input: IssueCreateInput!) {
  issueCreate(input: $input) {
    success
    issue { id identifier url }
  }
}
"""


class LinearClient:
    """Wrapper for filing moderation alerts as Linear issues"""
    
    def __init__(self, api_key: str = None, team_id: str = None):
        self.api_key = api_key or Config.LINEAR_API_KEY
        self.team_id = team_id or Config.LINEAR_TEAM_ID
        self.base_url = "https://api.linear.app/graphql"
        self.headers = {
            'Content-Type': 'application/json'
        }
        
        if self.api_key:
            self.headers['Authorization'] = self.api_key
        else:
            logger.warning("Linear API key not configured")
    
    def _make_request(self, query: str, variables: Dict) -> Optional[Dict]:
        """Make GraphQL request to Linear"""
        if not self.api_key or not self.team_id:
            logger.error("Linear client not configured")
            return None
        
        try:
            response = requests.post(
                self.base_url,
                headers=self.headers,
                json={'query': query, 'variables': variables},
                timeout=10
            )
            response.raise_for_status()
            payload = response.json()
            if payload.get('errors'):
                logger.error(f"Linear API errors: {payload['errors']}")
                return None
            return payload.get('data')
        except requests.exceptions.RequestException as e:
            logger.error(f"Linear API error: {str(e)}")
            return None
    
    def create_issue(self, title: str, description: str, priority: int = 2,
                     labels: list = None) -> Optional[Dict]:
        """Create an issue; returns {id, identifier, url} or None"""
        issue_input = {
            'teamId': self.team_id,
            'title': title,
            'description': description,
            'priority': priority
        }
        if labels:
            issue_input['labelIds'] = labels
        
        data = self._make_request(ISSUE_CREATE_MUTATION, {'input': issue_input})
        if not data or not data.get('issueCreate', {}).get('success'):
            return None
        return data['issueCreate'].get('issue')
