"""sigreq.integrations — External service gateway modules.

All outbound HTTP calls to Microsoft Graph must go through a gateway in
this package, never via bare `requests` calls in services or blueprints.

Current gateways:
  graph_gateway.GraphGateway — SharePoint lists over Microsoft Graph v1.0
"""
