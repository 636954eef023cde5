"""Shopify Admin GraphQL access and the sales-donated counter metaobject."""
