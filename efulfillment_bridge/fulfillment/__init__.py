"""Order models, XML transformation and eFulfillment submission."""
