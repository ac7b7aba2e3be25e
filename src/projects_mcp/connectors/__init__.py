"""GitHub REST/GraphQL clients and the Projects tool connector."""
