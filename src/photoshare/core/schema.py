"""
GraphQL schema for the PhotoShare API.

The type definitions are built with graphql-core and resolvers are attached
afterwards from a map keyed by ``(type, field)``.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from graphql import GraphQLObjectType, GraphQLScalarType, GraphQLSchema, build_schema

from .errors import PhotoShareError
from .scalars import DateTimeScalar

ResolverMap = Mapping[tuple[str, str], Callable[..., Any]]

TYPE_DEFS = '''
scalar DateTime

enum PhotoCategory {
  SELFIE
  PORTRAIT
  ACTION
  LANDSCAPE
  GRAPHIC
}

type User {
  githubLogin: ID!
  name: String
  avatar: String
  postedPhotos: [Photo!]!
  inPhotos: [Photo]!
}

type Photo {
  id: ID!
  url: String!
  name: String!
  description: String
  category: PhotoCategory!
  postedBy: User
  taggedUsers: [User]!
  created: DateTime!
}

input PostPhotoInput {
  name: String!
  category: PhotoCategory = PORTRAIT
  description: String
}

type AuthPayload {
  token: String!
  user: User!
}

type Query {
  me: User
  totalPhotos: Int!
  allPhotos: [Photo!]!
  totalUsers: Int!
  allUsers: [User!]!
  Photo(id: ID!): Photo
  User(login: ID!): User
}

type Mutation {
  postPhoto(input: PostPhotoInput!): Photo!
  tagPhoto(githubLogin: ID!, photoID: ID!): Photo
  githubAuth(code: String!): AuthPayload!
  addFakeUsers(count: Int = 1): [User!]!
  fakeUserAuth(githubLogin: ID!): AuthPayload!
}

type Subscription {
  newPhoto: Photo!
}
'''


def _bind_scalar(schema: GraphQLSchema, scalar: GraphQLScalarType) -> None:
    target = schema.get_type(scalar.name)
    if not isinstance(target, GraphQLScalarType):
        raise PhotoShareError(f"Scalar '{scalar.name}' not declared in schema")
    target.description = scalar.description
    target.serialize = scalar.serialize
    target.parse_value = scalar.parse_value
    target.parse_literal = scalar.parse_literal


def _get_field(schema: GraphQLSchema, type_name: str, field_name: str):
    graphql_type = schema.get_type(type_name)
    if not isinstance(graphql_type, GraphQLObjectType):
        raise PhotoShareError(f"Type '{type_name}' not found in schema")
    field = graphql_type.fields.get(field_name)
    if field is None:
        raise PhotoShareError(f"Field '{type_name}.{field_name}' not found in schema")
    return field


def build_photoshare_schema(
    resolvers: ResolverMap,
    subscriptions: Optional[ResolverMap] = None,
    type_defs: str = TYPE_DEFS,
) -> GraphQLSchema:
    """
    Build the executable schema.

    Args:
        resolvers: (type, field) -> resolve function
        subscriptions: (type, field) -> subscribe function (source stream)
        type_defs: SDL source

    Returns:
        Schema with resolvers and the DateTime scalar bound
    """
    schema = build_schema(type_defs)
    _bind_scalar(schema, DateTimeScalar)

    for (type_name, field_name), resolve in resolvers.items():
        _get_field(schema, type_name, field_name).resolve = resolve

    for (type_name, field_name), subscribe in (subscriptions or {}).items():
        _get_field(schema, type_name, field_name).subscribe = subscribe

    return schema
