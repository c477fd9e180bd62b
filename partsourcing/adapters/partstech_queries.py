"""
PartsTech GraphQL documents.

Operation names must match the query names; the server rejects mismatches.
"""

GET_VEHICLES_BY_VIN = """
query GetVehiclesByPlateVin($vin: String) {
  vehicles(vin: $vin) {
    id
    year
    make {
      id
      name
    }
    model {
      id
      name
    }
    engine {
      id
      name
    }
  }
}
"""

GET_TYPEAHEAD = """
query GetTypeahead($search: String!) {
  typeahead(search: $search) {
    item {
      __typename
      ...TypeaheadPartTypeGroup
      ...TypeaheadPartType
      ...TypeaheadGroupedPartNumber
      ...TypeaheadPartTypeWithAttributes
    }
    suggested
  }
  isPartNumber(search: $search)
}

fragment TypeaheadPartTypeGroup on PartTypeGroup {
  id
  name
  aliases
  partTypes {
    id
    aliases
    application
    name
  }
}

fragment TypeaheadPartType on PartType {
  id
  name
  application
  aliases
}

fragment TypeaheadGroupedPartNumber on GroupedPartNumber {
  id
  partNumber: number
  brandName: companyName
}

fragment TypeaheadPartTypeWithAttributes on SearchPartType {
  matches {
    ... on SearchPartTypeAttribute {
      name
      values {
        highlights
        value
      }
    }
  }
  partType {
    id
    name
    application
    aliases
  }
}
"""

GET_PRODUCTS = """
query GetProducts($searchInput: SearchInput!) {
  products(searchInput: $searchInput) {
    products {
      id
      partNumber
      partNumberId
      brand {
        id
        name
      }
      title
      price
      listPrice
      customerPrice
      coreCharge
      availability {
        quantity
        name
        address
        type
      }
      attributes {
        name
        values
      }
      images {
        preview
        medium
        full
      }
      stocked
      sponsorType
    }
    errors
  }
}
"""
